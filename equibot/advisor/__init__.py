"""Observation-driven advisor: background equity and throttled decisions."""

from .session import ActionThrottle, Advisor, AdvisorConfig, describe_hand
from .worker import EquityWorker

__all__ = [
    "ActionThrottle",
    "Advisor",
    "AdvisorConfig",
    "EquityWorker",
    "describe_hand",
]
