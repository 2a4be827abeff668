"""
Pot-odds decision policy.

Maps an equity estimate and the actions on offer to a single action.
The policy is a pure decision table: the same inputs always give the
same decision, and it never picks an action that is not on offer.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .models import ActionDecision, ActionKind, AvailableAction, BetSizeTier


@dataclass
class PolicyConfig:
    """Equity thresholds in percent. Each bound is inclusive."""
    value_bet: float = 70.0   # Bet the pot
    good_hand: float = 60.0   # Bet 3/4 pot when checked to, else call
    marginal: float = 50.0    # Check, or call with favorable pot odds
    weak: float = 40.0        # Check, else fold


# Where to go when the preferred action is not on offer
FALLBACKS = {
    ActionKind.BET: (ActionKind.BET, ActionKind.CALL, ActionKind.CHECK, ActionKind.FOLD),
    ActionKind.CALL: (ActionKind.CALL, ActionKind.CHECK, ActionKind.FOLD),
    ActionKind.CHECK: (ActionKind.CHECK, ActionKind.FOLD),
    ActionKind.FOLD: (ActionKind.FOLD, ActionKind.CHECK),
}


def _find(actions: Sequence[AvailableAction], kind: ActionKind) -> Optional[AvailableAction]:
    for action in actions:
        if action.kind == kind:
            return action
    return None


def pot_odds(actions: Sequence[AvailableAction], total_pot: int) -> float:
    """
    Pot odds in percent: cost to call over the pot after calling.

    Returns 0 when there is nothing to call.
    """
    call = _find(actions, ActionKind.CALL)
    call_amount = call.amount if call is not None else 0
    if call_amount <= 0:
        return 0.0
    return call_amount / (total_pot + call_amount) * 100


def _resolve(
    preferred: ActionKind,
    actions: Sequence[AvailableAction],
    rationale: str,
    bet_size: Optional[BetSizeTier] = None,
) -> ActionDecision:
    """Pick the preferred action, or the next safer one that is on offer."""
    offered = {a.kind for a in actions}
    for kind in FALLBACKS[preferred]:
        if kind not in offered:
            continue
        if kind != preferred:
            rationale = f"{rationale} ({preferred.value} unavailable, {kind.value} instead)"
        return ActionDecision(
            kind=kind,
            rationale=rationale,
            bet_size=bet_size if kind == ActionKind.BET else None,
        )
    return ActionDecision(
        kind=ActionKind.WAIT,
        rationale=f"{rationale} (no safe action available)",
    )


def decide(
    equity: Optional[float],
    available_actions: Sequence[AvailableAction],
    total_pot: int = 0,
    config: Optional[PolicyConfig] = None,
) -> ActionDecision:
    """
    Choose an action for the given equity.

    Args:
        equity: Estimated equity (0-1), or None if unavailable
        available_actions: Actions currently on offer
        total_pot: Pot before calling, for pot odds
        config: Equity thresholds

    Returns:
        ActionDecision using only offered actions
    """
    config = config or PolicyConfig()
    actions = list(available_actions)
    has_check = _find(actions, ActionKind.CHECK) is not None

    if equity is None or math.isnan(equity):
        return _resolve(ActionKind.CHECK, actions, "No equity estimate - conservative play")

    # Rounded so 0.7 lands on 70.0 rather than a hair below it
    pct = round(equity * 100, 9)

    if pct >= config.value_bet:
        return _resolve(ActionKind.BET, actions, "Strong hand - value bet", BetSizeTier.POT)

    if pct >= config.good_hand:
        if has_check:
            return _resolve(
                ActionKind.BET, actions, "Good hand - value bet", BetSizeTier.THREE_QUARTER_POT
            )
        return _resolve(ActionKind.CALL, actions, "Good hand - call")

    if pct >= config.marginal:
        if has_check:
            return _resolve(ActionKind.CHECK, actions, "Marginal hand - check")
        odds = pot_odds(actions, total_pot)
        if pct > odds:
            return _resolve(
                ActionKind.CALL, actions,
                f"Pot odds favorable ({pct:.1f}% equity vs {odds:.1f}% needed)",
            )
        return _resolve(
            ActionKind.FOLD, actions,
            f"Poor pot odds ({pct:.1f}% equity vs {odds:.1f}% needed)",
        )

    if pct >= config.weak:
        if has_check:
            return _resolve(ActionKind.CHECK, actions, "Weak hand - check")
        return _resolve(ActionKind.FOLD, actions, "Weak hand - fold")

    return _resolve(ActionKind.FOLD, actions, "Very weak hand")
