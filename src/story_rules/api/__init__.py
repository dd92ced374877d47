"""Public API surface for HTTP serving."""

from story_rules.api.app import create_app
from story_rules.api.contracts import (
    DeriveRequest,
    EvaluateRequest,
    EvaluateResponse,
    GateRequest,
    GateResponse,
)

__all__ = [
    "DeriveRequest",
    "EvaluateRequest",
    "EvaluateResponse",
    "GateRequest",
    "GateResponse",
    "create_app",
]
