"""Decision policy and integration-boundary models."""

from .models import (
    ActionDecision,
    ActionKind,
    AvailableAction,
    BetSizeTier,
    EquityReport,
    GameObservation,
)
from .policy import PolicyConfig, decide, pot_odds

__all__ = [
    "ActionDecision",
    "ActionKind",
    "AvailableAction",
    "BetSizeTier",
    "EquityReport",
    "GameObservation",
    "PolicyConfig",
    "decide",
    "pot_odds",
]
