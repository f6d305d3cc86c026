"""Exceptions raised while validating access tokens."""


class InvalidToken(ValueError):
    """The token is empty, or is not known to the datastore."""


class ExpiredToken(InvalidToken):
    """The token exists, but is past its expiry."""


class UserNotFound(InvalidToken):
    """The token exists, but its owner does not."""
