class MatchingError(Exception):
    """Base class for errors raised by the matching engine."""


class NotFoundError(MatchingError):
    """A referenced campaign, creator or matching result does not exist."""

    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} {identifier} not found")


class DataAccessError(MatchingError):
    """The underlying store failed to complete an operation."""


class ProfileValidationError(MatchingError):
    """A creator profile payload was rejected before any write."""

    def __init__(self, errors: list[dict]):
        self.errors = errors
        super().__init__(f"Invalid profile payload ({len(errors)} error(s))")
