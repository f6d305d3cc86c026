"""Hashing and verification of user passwords and client secrets."""

import logging

import bcrypt

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Generate a bcrypt hash of a password or client secret."""
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
    return hashed.decode('ascii')


def check_password(password: str, hashed: str) -> bool:
    """Check a password or client secret against a bcrypt hash."""
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('ascii'))
    except ValueError as e:     # Malformed hash in the database.
        logger.error('Could not check password: %s', e)
        return False
