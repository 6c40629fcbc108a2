"""
Request controllers.

Controllers take request data that the routes have already extracted, call
the services, and return :data:`ResponseData`. Service failures are
re-raised as :class:`werkzeug.exceptions.HTTPException` whose description
is the failure reason (e.g. ``loginFail``).
"""

from typing import Tuple, Dict, Type

from werkzeug.exceptions import HTTPException, BadRequest, Unauthorized, \
    Forbidden, NotFound, Conflict, InternalServerError

from .. import exceptions

ResponseData = Tuple[dict, int, dict]

NOT_LOGGED_IN = 'notLoggedIn'
INVALID_BODY = 'invalidBody'

_STATUS: Dict[Type[exceptions.UserAccountsError], Type[HTTPException]] = {
    exceptions.ValidationFailed: BadRequest,
    exceptions.AuthenticationFailed: Unauthorized,
    exceptions.NotAuthorized: Forbidden,
    exceptions.UserExists: Conflict,
    exceptions.NoSuchUser: NotFound,
    exceptions.ResetPasswordFailed: InternalServerError,
}


def to_http(error: exceptions.UserAccountsError) -> HTTPException:
    """Get the HTTP exception that reports ``error`` to the client."""
    for exc_type, http_type in _STATUS.items():
        if isinstance(error, exc_type):
            return http_type(error.reason)
    return InternalServerError(error.reason)


def invalid_body() -> BadRequest:
    """Report a request body that did not validate."""
    return BadRequest(INVALID_BODY)
