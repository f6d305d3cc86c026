"""
Bearer token authentication for Flask routes.

This module provides :func:`protected`, a decorator factory used to protect
API routes. The decorated route is only called if the request carries a
valid access token in its ``Authorization`` header, and (optionally) if the
owner of the token is one of the permitted kinds of user:

.. code-block:: python

   from sims.auth.decorators import protected
   from sims.domain import UserKind


   @blueprint.route('/students/me', methods=['GET'])
   @protected(UserKind.STUDENT)
   def student_me():
       data, code, headers = profiles.get_student(request.auth)
       return jsonify(data), code, headers


On success the token and its owner are attached to the request as
``request.auth`` (a :class:`domain.Authorization`).
"""

import logging
from functools import wraps
from typing import Any, Callable

from flask import request
from werkzeug.exceptions import Unauthorized, Forbidden

from .. import domain
from . import validate
from .exceptions import InvalidToken

logger = logging.getLogger(__name__)

MISSING_HEADER = 'missing authorization header'
MALFORMED_HEADER = 'invalid authorization header format'
INVALID_TOKEN = 'invalid or expired access token'
FORBIDDEN = 'forbidden - insufficient permissions'


def protected(*kinds: domain.UserKind) -> Callable:
    """
    Generate a decorator that requires a valid bearer token.

    Parameters
    ----------
    kinds : :class:`domain.UserKind`
        If given, only users of these kinds may use the decorated route.

    Returns
    -------
    function

    """
    def protector(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            header = request.headers.get('Authorization')
            if not header:
                logger.debug('No authorization header')
                raise Unauthorized(MISSING_HEADER)

            parts = header.split(' ')
            if len(parts) != 2 or parts[0] != 'Bearer':
                logger.debug('Malformed authorization header')
                raise Unauthorized(MALFORMED_HEADER)

            try:
                token, user = validate(parts[1])
            except InvalidToken as e:
                logger.debug('Rejected access token: %s', e)
                raise Unauthorized(INVALID_TOKEN) from e

            if kinds and user.kind not in kinds:
                logger.debug('%s user may not access this route',
                             user.kind.value)
                raise Forbidden(FORBIDDEN)

            request.auth = domain.Authorization(token=token, user=user)
            return func(*args, **kwargs)
        return wrapper
    return protector
