from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    ILLEGAL_PHASE = "IllegalPhase"
    INSUFFICIENT_ENERGY = "InsufficientEnergy"
    INVALID_TARGET = "InvalidTarget"
    SKILL_UNAVAILABLE = "SkillUnavailable"
    ALREADY_TAPPED = "AlreadyTapped"
    EMPTY_RESOURCE_LOSS = "EmptyResourceLoss"
    ZONE_FULL = "ZoneFull"
    LIMIT_REACHED = "LimitReached"


class RuleViolation(RuntimeError):
    """An action the rules do not allow right now. State is left untouched."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class MalformedActionError(ValueError):
    """A request that can never be valid (bad index, unknown action)."""
