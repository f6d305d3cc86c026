"""Web Server Gateway Interface entry-point."""

from sims.factory import create_web_app

__flask_app__ = create_web_app()


def application(environ, start_response):    # type: ignore
    """
    WSGI application.

    Configuration comes only from ``config.py`` and the process environment
    it reads. Nothing in the request environ is copied into either, so
    request headers such as ``HTTP_AUTHORIZATION`` never outlive the request.
    """
    return __flask_app__(environ, start_response)
