"""Web Server Gateway Interface entry-point."""

from useraccounts.factory import create_web_app

__flask_app__ = None


def application(environ, start_response):
    """WSGI application factory."""
    global __flask_app__
    if __flask_app__ is None:
        __flask_app__ = create_web_app()
    return __flask_app__(environ, start_response)
