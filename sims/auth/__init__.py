"""
Validation of bearer tokens presented to the protected API.

Every route under ``/api`` is gated by :func:`.decorators.protected`, which
calls :func:`validate` with the token from the ``Authorization`` header.
Validation is a read-only lookup: nothing is locked, and a token that is
refreshed while a request is in flight may or may not be honored by that
request.
"""

import logging
from typing import Tuple

from .. import domain
from ..services import datastore
from .exceptions import InvalidToken, ExpiredToken, UserNotFound

logger = logging.getLogger(__name__)


def validate(bearer: str) -> Tuple[domain.AccessToken, domain.User]:
    """
    Resolve an opaque access token to its record and its owner.

    Parameters
    ----------
    bearer : str
        The access token, without the ``Bearer`` prefix.

    Returns
    -------
    :class:`domain.AccessToken`
    :class:`domain.User`

    Raises
    ------
    :class:`InvalidToken`
        Raised if the token is empty or does not exist.
    :class:`ExpiredToken`
        Raised if the token is past its expiry.
    :class:`UserNotFound`
        Raised if the user who owns the token does not exist.

    """
    if not bearer:
        raise InvalidToken('Token is empty')
    try:
        token = datastore.load_access_token(bearer)
    except datastore.NoSuchToken as e:
        raise InvalidToken('No such token') from e

    if datastore.now() > token.expires:
        logger.debug('Token expired at %s', token.expires)
        raise ExpiredToken(f'Token expired at {token.expires}')

    try:
        user = datastore.load_user(token.user_id)
    except datastore.NoSuchUser as e:
        logger.error('Token belongs to missing user %s', token.user_id)
        raise UserNotFound(f'No user {token.user_id}') from e
    return token, user
