"""Provide an API for user authentication against the datastore."""

import logging

from . import datastore
from .. import domain, passwords

logger = logging.getLogger(__name__)


class AuthenticationFailed(RuntimeError):
    """Failed to authenticate user with provided credentials."""


def authenticate(username_or_email: str, password: str) -> domain.User:
    """
    Validate username/password. If successful, retrieve the user.

    Parameters
    ----------
    username_or_email : str
        Users may log in with their e-mail address. Students may also use
        their registration number. E-mail addresses and registration
        numbers never overlap, so the order of the lookups does not matter.
    password : str
        Password (as entered).

    Returns
    -------
    :class:`domain.User`

    Raises
    ------
    :class:`AuthenticationFailed`
        Failed to authenticate user with provided credentials. The reason
        is logged but not exposed: callers should not tell an unknown user
        apart from a wrong password or an inactive account.

    """
    if not username_or_email or not password:
        raise AuthenticationFailed('Username and password are required')
    try:
        user = _get_user(username_or_email)
    except datastore.NoSuchUser as e:
        logger.debug('No such user')
        raise AuthenticationFailed('Invalid username or password') from e

    if not passwords.check_password(password, user.password_hash):
        logger.debug('Incorrect password for user %s', user.user_id)
        raise AuthenticationFailed('Invalid username or password')

    if not user.is_active:
        logger.debug('User %s is not active', user.user_id)
        raise AuthenticationFailed('Account is inactive')
    return user


def _get_user(username_or_email: str) -> domain.User:
    try:
        return datastore.load_user_by_email(username_or_email)
    except datastore.NoSuchUser:
        # Registration numbers are stored on the student profile.
        return datastore.load_user_by_reg_number(username_or_email)
