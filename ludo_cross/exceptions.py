# Exception types raised by the rule engine
class LudoError(Exception):
    """Base exception for rule-engine errors."""

    pass


class BoardIntegrityError(LudoError):
    """Raised when the board topology cannot be built into a playable track."""

    pass


class IllegalMoveError(LudoError, ValueError):
    """Raised when a move is applied that the resolver would not allow."""

    pass
