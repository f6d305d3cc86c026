"""Flask configuration."""

import os
import secrets

SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_urlsafe(16))
"""Sets the `Flask` secret key. Not used for any token material."""

APP_VERSION = os.environ.get('APP_VERSION', '1.0.0')
"""The application version, reported by the health endpoint."""

LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))
LOG_JSON = bool(int(os.environ.get('LOG_JSON', '1')))
"""If 1, log records are rendered as JSON; otherwise as plain text."""

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///sims.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False
CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))

#################### OAuth2 ####################
OAUTH_CLIENT_ID = os.environ.get('OAUTH_CLIENT_ID', 'lms-client-id')
OAUTH_CLIENT_SECRET = os.environ.get('OAUTH_CLIENT_SECRET',
                                     'lms-client-secret')
"""Plaintext secret for the seeded LMS client. Only its hash is stored."""

OAUTH_CLIENT_NAME = os.environ.get('OAUTH_CLIENT_NAME', 'Mock LMS')
OAUTH_REDIRECT_URIS = os.environ.get('OAUTH_REDIRECT_URIS',
                                     'http://localhost:8080/auth/callback')
"""Comma-separated redirect URIs registered for the seeded client."""

OAUTH_DEFAULT_SCOPE = os.environ.get('OAUTH_DEFAULT_SCOPE',
                                     'student.read courses.read')
"""Scope granted to every authorization code. Scopes are not negotiated."""

OAUTH_TOKEN_EXPIRY = int(os.environ.get('OAUTH_TOKEN_EXPIRY', '3600'))
"""Lifetime of an access token, in seconds."""

OAUTH_CODE_EXPIRY = int(os.environ.get('OAUTH_CODE_EXPIRY', '600'))
"""Lifetime of an authorization code, in seconds."""

OAUTH_REFRESH_TOKEN_EXPIRY = int(os.environ.get('OAUTH_REFRESH_TOKEN_EXPIRY',
                                                '2592000'))
"""
Seconds a refresh token remains usable after its access token expires.

Refreshing resets the window, since the new access token has a new expiry.
Token records are kept by ``purge`` until this window has passed.
"""
