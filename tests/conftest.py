"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from equibot.game.cards import parse_cards
from equibot.strategy.models import ActionKind, AvailableAction


@pytest.fixture
def rng():
    """Seeded generator so stochastic tests are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def cards():
    """Parse a card string like 'As Ks Qs'."""
    return parse_cards


@pytest.fixture
def actions():
    """Build available actions from shorthand like 'fold', 'call:20'."""

    def _actions(*specs):
        result = []
        for text in specs:
            kind, _, amount = text.partition(":")
            result.append(AvailableAction(ActionKind.from_string(kind), int(amount or 0)))
        return result

    return _actions
