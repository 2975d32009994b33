"""Deterministic, headless rules engine for Spektrum.

IMPORTANT: This package must never import a rendering toolkit.
"""

from .actions import (
    AdvancePhaseAction,
    DiscardCardAction,
    DrawCardAction,
    EndTurnAction,
    EvolveAvatarAction,
    PlayCardAction,
    SetEnergyAction,
    SwitchAvatarAction,
    UseSkillAction,
)
from .errors import ErrorKind, MalformedActionError, RuleViolation
from .match import new_match, replay, step
from .state import MatchConfig, MatchState, Phase, StepResult
from .types import ActionCard, AvatarCard, CardDatabase, Skill

__all__ = [
    "ActionCard",
    "AdvancePhaseAction",
    "AvatarCard",
    "CardDatabase",
    "DiscardCardAction",
    "DrawCardAction",
    "EndTurnAction",
    "ErrorKind",
    "EvolveAvatarAction",
    "MalformedActionError",
    "MatchConfig",
    "MatchState",
    "Phase",
    "PlayCardAction",
    "RuleViolation",
    "SetEnergyAction",
    "Skill",
    "StepResult",
    "SwitchAvatarAction",
    "UseSkillAction",
    "new_match",
    "replay",
    "step",
]
