"""Data models exchanged with the table integration layer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from equibot.game.cards import Card, parse_cards


class ActionKind(Enum):
    """Actions a player can take, plus WAIT for 'do nothing yet'."""
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    WAIT = "wait"

    @classmethod
    def from_string(cls, s: str) -> "ActionKind":
        """Parse action kind from a button label or class name."""
        s = s.lower().strip()

        if "fold" in s:
            return cls.FOLD
        if "check" in s:
            return cls.CHECK
        if "call" in s:
            return cls.CALL
        if "bet" in s or "raise" in s:
            return cls.BET
        if "wait" in s:
            return cls.WAIT

        raise ValueError(f"Unknown action type: {s}")

    def __str__(self) -> str:
        return self.value


class BetSizeTier(Enum):
    """Preset bet sizes offered by the table."""
    HALF_POT = "1/2 pot"
    THREE_QUARTER_POT = "3/4 pot"
    POT = "pot"
    ALL_IN = "all-in"

    @property
    def pot_fraction(self) -> Optional[float]:
        """Fraction of the pot, None for all-in."""
        return {
            BetSizeTier.HALF_POT: 0.5,
            BetSizeTier.THREE_QUARTER_POT: 0.75,
            BetSizeTier.POT: 1.0,
        }.get(self)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AvailableAction:
    """An action button currently offered to the player."""
    kind: ActionKind
    amount: int = 0  # Chips required, 0 when free or unknown

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError(f"Action amount must be non-negative, got {self.amount}")

    @classmethod
    def from_dict(cls, data: dict) -> "AvailableAction":
        kind = ActionKind.from_string(str(data["kind"]))
        if kind == ActionKind.WAIT:
            raise ValueError("'wait' is not an available table action")
        return cls(kind=kind, amount=int(data.get("amount") or 0))

    def __repr__(self) -> str:
        if self.amount > 0:
            return f"{self.kind.name} {self.amount}"
        return self.kind.name


def _card_key(codes: list[str]) -> tuple[str, ...]:
    try:
        return tuple(str(c) for c in parse_cards(codes))
    except ValueError:
        # Unreadable codes still need a stable identity
        return tuple(codes)


@dataclass
class GameObservation:
    """
    What the integration layer sees at the table.

    Card fields hold canonical two-character codes.
    """
    hole_cards: list[str] = field(default_factory=list)   # 0-2 cards, e.g. ["As", "Kh"]
    board_cards: list[str] = field(default_factory=list)  # 0-5 cards
    pot_size: int = 0
    total_pot: int = 0
    available_actions: list[AvailableAction] = field(default_factory=list)

    @property
    def hole(self) -> list[Card]:
        return parse_cards(self.hole_cards)

    @property
    def board(self) -> list[Card]:
        return parse_cards(self.board_cards)

    @property
    def key(self) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """
        Identity of the cards this observation's equity depends on.

        Codes are normalized, so '10h' and 'Th' give the same key.
        """
        return _card_key(self.hole_cards), _card_key(self.board_cards)

    def decide_pot(self) -> int:
        """Pot used for pot odds: the total pot, or the pot size if no total is shown."""
        return self.total_pot or self.pot_size

    def has_action(self, kind: ActionKind) -> bool:
        return any(a.kind == kind for a in self.available_actions)

    @classmethod
    def from_dict(cls, data: dict) -> "GameObservation":
        """Build an observation from its camelCase JSON form."""
        return cls(
            hole_cards=list(data.get("holeCards") or []),
            board_cards=list(data.get("boardCards") or []),
            pot_size=int(data.get("potSize") or 0),
            total_pot=int(data.get("totalPot") or 0),
            available_actions=[
                AvailableAction.from_dict(a) for a in data.get("availableActions") or []
            ],
        )

    def to_dict(self) -> dict:
        return {
            "holeCards": list(self.hole_cards),
            "boardCards": list(self.board_cards),
            "potSize": self.pot_size,
            "totalPot": self.total_pot,
            "availableActions": [
                {"kind": a.kind.value, "amount": a.amount} for a in self.available_actions
            ],
        }


@dataclass(frozen=True)
class ActionDecision:
    """The action chosen for the player, with the reason for it."""
    kind: ActionKind
    rationale: str
    bet_size: Optional[BetSizeTier] = None

    def to_dict(self) -> dict:
        data = {"kind": self.kind.value, "rationale": self.rationale}
        if self.bet_size is not None:
            data["betSizeTier"] = self.bet_size.value
        return data

    def __str__(self) -> str:
        if self.bet_size is not None:
            return f"{self.kind.name} {self.bet_size.value} - {self.rationale}"
        return f"{self.kind.name} - {self.rationale}"


@dataclass(frozen=True)
class EquityReport:
    """Equity summary for display."""
    equity: Optional[float]  # None when no estimate is available
    hand_description: str = ""
    trials_run: int = 0
    exact: bool = False

    @property
    def available(self) -> bool:
        return self.equity is not None

    @property
    def percent(self) -> Optional[float]:
        return None if self.equity is None else self.equity * 100

    def to_dict(self) -> dict:
        return {
            "equity": self.equity,
            "handDescription": self.hand_description,
            "trialsRun": self.trials_run,
        }
