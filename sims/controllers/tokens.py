"""
Controller for the OAuth2 token endpoint.

Two grants are supported:

``authorization_code``
    The LMS backend exchanges a code obtained via
    :mod:`sims.controllers.authorization`, together with its client
    credentials (``client_secret_post``), for an access token and a refresh
    token. A code can be exchanged exactly once.
``refresh_token``
    The LMS exchanges a refresh token for a new access token. The old access
    token is deleted, and the same refresh token is returned. A refresh token
    can be used until ``refresh_expires_in`` seconds after its current access
    token expires.

Failures are reported with the error codes of RFC 6749 section 5.2. Grant
failures are deliberately vague: an unknown code, a used code, an expired
code and a mismatched redirect URI all look the same to the client.
"""

import logging
from http import HTTPStatus
from typing import Optional

from authlib.oauth2.rfc6749.errors import OAuth2Error, InvalidRequestError, \
    InvalidClientError, InvalidGrantError, UnsupportedGrantTypeError
from werkzeug.datastructures import MultiDict

from . import ResponseData
from .. import domain, passwords, tokens
from ..services import datastore

logger = logging.getLogger(__name__)

TOKEN_TYPE = 'Bearer'
NO_CACHE = {'Cache-Control': 'no-store', 'Pragma': 'no-cache'}


def issue_token(form_data: MultiDict, token_expires_in: int,
                refresh_expires_in: Optional[int] = None) -> ResponseData:
    """
    Issue an access token for an authorization code or a refresh token.

    Parameters
    ----------
    form_data : MultiDict
        The POSTed form. ``grant_type`` selects the grant.
    token_expires_in : int
        Lifetime of the new access token, in seconds.
    refresh_expires_in : int
        Seconds after expiry of its access token that a refresh token is
        still accepted. If None, refresh tokens do not expire.

    Returns
    -------
    dict
        The token response, or an OAuth2 error.
    int
        200 OK, or 400 Bad Request.
    dict
        Headers to add to the response.

    """
    grant_type = form_data.get('grant_type', '')
    logger.debug('Request to issue token with grant %s', grant_type)
    try:
        if grant_type == 'authorization_code':
            token = _authorization_code_grant(form_data, token_expires_in)
        elif grant_type == 'refresh_token':
            token = _refresh_token_grant(form_data, token_expires_in,
                                         refresh_expires_in)
        else:
            raise UnsupportedGrantTypeError(grant_type)
    except OAuth2Error as e:
        logger.debug('Token request failed: %s %s', e.error, e.description)
        return _error_response(e)
    return _token_response(token)


def _authorization_code_grant(form_data: MultiDict,
                              token_expires_in: int) -> domain.AccessToken:
    code = form_data.get('code', '')
    client_id = form_data.get('client_id', '')
    client_secret = form_data.get('client_secret', '')
    redirect_uri = form_data.get('redirect_uri', '')
    if not code or not client_id or not client_secret:
        raise InvalidRequestError(
            'code, client_id and client_secret are required'
        )

    client = _authenticate_client(client_id, client_secret)
    try:
        token = datastore.redeem_auth_code(
            code, client.client_id, redirect_uri,
            tokens.new_access_token(), tokens.new_refresh_token(),
            token_expires_in
        )
    except datastore.AuthCodeExpired as e:
        logger.debug('Expired auth code: %s', e)
        raise InvalidGrantError('Invalid authorization code') from e
    except datastore.NoSuchAuthCode as e:
        logger.debug('Auth code not redeemable: %s', e)
        raise InvalidGrantError('Invalid authorization code') from e
    logger.info('Issued access token to client %s for user %s',
                token.client_id, token.user_id)
    return token


def _refresh_token_grant(form_data: MultiDict, token_expires_in: int,
                         refresh_expires_in: Optional[int]) \
        -> domain.AccessToken:
    refresh_token = form_data.get('refresh_token', '')
    if not refresh_token:
        raise InvalidRequestError('refresh_token is required')
    try:
        old = datastore.load_access_token_by_refresh(refresh_token)
        if refresh_expires_in is not None \
                and not old.refreshable(datastore.now(), refresh_expires_in):
            logger.debug('Refresh token expired with %s', old.expires)
            raise InvalidGrantError('Invalid refresh token')
        token = datastore.replace_access_token(old, tokens.new_access_token(),
                                               token_expires_in)
    except datastore.NoSuchToken as e:
        logger.debug('Refresh token not usable: %s', e)
        raise InvalidGrantError('Invalid refresh token') from e
    logger.info('Refreshed access token for client %s, user %s',
                token.client_id, token.user_id)
    return token


def _authenticate_client(client_id: str,
                         client_secret: str) -> domain.Client:
    try:
        client = datastore.load_client(client_id)
    except datastore.NoSuchClient as e:
        logger.warning('Token request from unknown client %s', client_id)
        raise InvalidClientError('Client authentication failed') from e
    if not passwords.check_password(client_secret, client.client_secret):
        logger.warning('Bad client secret for %s', client_id)
        raise InvalidClientError('Client authentication failed')
    return client


def _token_response(token: domain.AccessToken) -> ResponseData:
    data = {
        'access_token': token.token,
        'token_type': TOKEN_TYPE,
        'expires_in': token.expires_in(datastore.now()),
        'refresh_token': token.refresh_token,
        'scope': token.scope,
    }
    return data, HTTPStatus.OK, dict(NO_CACHE)


def _error_response(error: OAuth2Error) -> ResponseData:
    data = {'error': error.error}
    if error.description:
        data['error_description'] = error.description
    return data, HTTPStatus.BAD_REQUEST, dict(NO_CACHE)
