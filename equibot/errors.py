"""Exception hierarchy for equibot."""


class EquibotError(Exception):
    """Base class for all equibot errors."""


class InvalidCardCode(EquibotError, ValueError):
    """A card code is not one rank character followed by one suit character."""


class InvalidBoardLength(EquibotError, ValueError):
    """More than five community cards were supplied."""


class InsufficientHoleCards(EquibotError, ValueError):
    """Fewer than two hole cards are known, so no estimate can be made."""


class InvariantViolation(EquibotError):
    """
    Card book-keeping went wrong.

    These never happen with correct callers. They abort the current
    estimate only.
    """


class UnknownCardRemoval(InvariantViolation):
    """A card was removed from a deck that does not contain it."""


class DeckExhausted(InvariantViolation):
    """More cards were requested than remain in the deck."""


class EstimateCancelled(EquibotError):
    """An in-flight estimate was superseded by a newer observation."""
