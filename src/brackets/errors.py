class BracketError(Exception):
    """Base class for bracket errors."""


class InvalidInputError(BracketError):
    """Participant list or seeding mode cannot produce a bracket."""


class UnknownMatchError(BracketError):
    """A match id does not exist in the bracket or has no stored result."""
