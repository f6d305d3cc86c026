"""
Generation of opaque OAuth2 credentials.

Codes and tokens carry no information of their own: they are random strings
that only mean something once looked up in the datastore. They are drawn
from :class:`random.SystemRandom` by :func:`authlib.common.security.generate_token`,
and nothing else in the application shares that source.
"""

from authlib.common.security import generate_token

AUTH_CODE_LENGTH = 48
ACCESS_TOKEN_LENGTH = 64
REFRESH_TOKEN_LENGTH = 64


def new_authorization_code() -> str:
    """Generate a new authorization code."""
    return generate_token(AUTH_CODE_LENGTH)


def new_access_token() -> str:
    """Generate a new access token."""
    return generate_token(ACCESS_TOKEN_LENGTH)


def new_refresh_token() -> str:
    """Generate a new refresh token."""
    return generate_token(REFRESH_TOKEN_LENGTH)
