"""
Controllers for registration, login, logout and password reset.

When a user logs in they are issued a session token, which the routes store
in a long-lived cookie. The token is bound to the IP address and browser
family of the client, and is only honoured on requests that present the
same fingerprint.
"""

from typing import Dict, Any, Optional

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import Forbidden

from wtforms import StringField, PasswordField, Form
from wtforms.validators import DataRequired, Length
from wtforms import validators

from retry import retry

from .. import logging
from ..domain import User, to_public_dict
from ..exceptions import UserAccountsError, Unavailable
from ..fingerprint import Client
from ..services import UserApp
from . import ResponseData, to_http, invalid_body, NOT_LOGGED_IN

logger = logging.getLogger(__name__)

SESSION_COOKIE = 'session_cookie'
"""Key of the session cookie in the ``cookies`` of the response data."""


class RegistrationForm(Form):
    """Self-registration."""

    username = StringField('Username',
                           validators=[DataRequired(), Length(max=255)])
    password = PasswordField('Password', validators=[DataRequired()])
    email = StringField('E-mail',
                        validators=[validators.Optional(), Length(max=255)])


class LoginForm(Form):
    """Log in form."""

    username = StringField('Username or e-mail', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


class ResetForm(Form):
    """Request a password reset."""

    email = StringField('E-mail', validators=[DataRequired()])


def current_user(services: UserApp, client: Client) -> Optional[User]:
    """Get the user whose session the client presents, if any."""
    return _do_token_login(services, client)


def register(services: UserApp, form_data: MultiDict,
             client: Client) -> ResponseData:
    """
    Register a new user and log them in.

    Parameters
    ----------
    services : :class:`.UserApp`
    form_data : MultiDict
        Should include ``username`` and ``password``, and may include
        ``email``.
    client : :class:`.Client`

    Returns
    -------
    dict
        The new user under ``user``, and the session cookie under
        ``cookies``.
    int
        201 if all goes well.
    dict
        Headers to add to the response.

    """
    form = RegistrationForm(form_data)
    if not form.validate():
        logger.debug('Registration data is not valid: %s', form.errors)
        raise invalid_body()
    try:
        _do_register(services, form.username.data, form.password.data,
                     form.email.data or None)
        user = _do_login(services, form.username.data, form.password.data,
                         client)
    except UserAccountsError as e:
        logger.debug('Registration failed: %s', e)
        raise to_http(e) from e
    return _logged_in(services, user), 201, {}


def login(services: UserApp, form_data: MultiDict,
          client: Client) -> ResponseData:
    """
    Log a user in.

    If the client already holds a valid session, that session's user is
    returned and no new session is created.

    Returns
    -------
    dict
        The user under ``user``, and the session cookie under ``cookies``
        when a new session was created.
    int
        Status code. 200 if all goes well.
    dict
        Headers to add to the response.

    """
    existing = _do_token_login(services, client)
    if existing is not None:
        logger.debug('Client is already logged in as %s', existing.user_id)
        return {'user': to_public_dict(existing)}, 200, {}

    form = LoginForm(form_data)
    if not form.validate():
        logger.debug('Login data is not valid')
        raise invalid_body()
    try:
        user = _do_login(services, form.username.data, form.password.data,
                         client)
    except UserAccountsError as e:
        logger.debug('Login failed: %s', e)
        raise to_http(e) from e
    return _logged_in(services, user), 200, {}


def logout(services: UserApp, client: Client) -> ResponseData:
    """Log the client out, and expire its session cookie."""
    user = _do_token_login(services, client)
    if user is None:
        raise Forbidden(NOT_LOGGED_IN)
    _do_logout(services, client.session_id)
    logger.debug('Logged out user %s', user.user_id)
    data: Dict[str, Any] = {
        'success': True,
        'cookies': {SESSION_COOKIE: ('', 0)}
    }
    return data, 200, {}


def reset_password(services: UserApp, form_data: MultiDict) -> ResponseData:
    """Send a password reset code to the address given in the form."""
    form = ResetForm(form_data)
    if not form.validate():
        raise invalid_body()
    try:
        _do_reset(services, form.email.data)
    except UserAccountsError as e:
        logger.debug('Password reset failed: %s', e)
        raise to_http(e) from e
    return {'success': True}, 200, {}


def _logged_in(services: UserApp, user: User) -> Dict[str, Any]:
    max_age = services.auth.settings.session_cookie_max_age
    return {
        'user': to_public_dict(user),
        'cookies': {SESSION_COOKIE: (user.session_id, max_age)}
    }


# These are broken out to add retry logic.
@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_register(services: UserApp, username: str, password: str,
                 email: Optional[str]) -> User:
    return services.auth.register_user(username, password, email)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_login(services: UserApp, username: str, password: str,
              client: Client) -> User:
    return services.auth.login_user(username, password, client.ip,
                                    client.browser)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_token_login(services: UserApp, client: Client) -> Optional[User]:
    return services.auth.login_user_with_token(client.session_id, client.ip,
                                               client.browser)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_logout(services: UserApp, token: Optional[str]) -> bool:
    return services.auth.logout_user(token)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_reset(services: UserApp, email: str) -> bool:
    return services.auth.reset_password(email)
