"""Provides the JSON API for user accounts."""

from typing import Any
from datetime import timedelta

from flask import Blueprint, Response, current_app, jsonify, request, \
    make_response
from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest, ServiceUnavailable

from . import logging
from .controllers import authentication, users, INVALID_BODY
from .fingerprint import Client, browser_family
from .services import UserApp
from .store import util

logger = logging.getLogger(__name__)
blueprint = Blueprint('useraccounts', __name__, url_prefix='')


def get_services() -> UserApp:
    """Get the services of the current application."""
    services: UserApp = current_app.extensions['useraccounts']
    return services


def get_client() -> Client:
    """Fingerprint the client of the current request."""
    cookie_name = get_services().auth.settings.session_cookie_name
    return Client(ip=request.remote_addr or '',
                  browser=browser_family(request.headers.get('User-Agent')),
                  session_id=request.cookies.get(cookie_name))


def get_body() -> MultiDict:
    """Get the JSON body of the request as form data."""
    body = request.get_json(silent=True)
    if body is None:
        return MultiDict()
    if not isinstance(body, dict):
        raise BadRequest(INVALID_BODY)
    return as_form(body)


def as_form(data: dict) -> MultiDict:
    """Keep the scalar, non-null values of a JSON object."""
    return MultiDict([(k, v) for k, v in data.items() if v is not None
                      and not isinstance(v, (dict, list))])


def set_cookies(response: Response, data: dict) -> None:
    """
    Update a :class:`.Response` with cookies in controller data.

    Contollers seeking to update cookies must include a 'cookies' key
    in their response data.
    """
    cookies = data.pop('cookies', None)
    if cookies is None:
        return None
    settings = get_services().auth.settings
    names = {authentication.SESSION_COOKIE: settings.session_cookie_name}
    for cookie_key, (cookie_value, expires) in cookies.items():
        cookie_name = names[cookie_key]
        max_age = timedelta(seconds=expires)
        logger.debug('Set cookie %s, max_age %s', cookie_name, max_age)
        params: dict = dict(httponly=True)
        if settings.session_cookie_secure:
            params.update({'secure': True, 'samesite': 'lax'})
        response.set_cookie(cookie_name, cookie_value, max_age=max_age,
                            **params)


def respond(data: dict, code: int, headers: dict) -> Response:
    """Render controller data as a JSON response."""
    cookies = {'cookies': data.pop('cookies', None)}
    response: Response = make_response(jsonify(data), code, headers)
    set_cookies(response, cookies)
    return response


@blueprint.after_request
def apply_response_headers(response: Response) -> Response:
    """Prevent UI redress attacks, and caching of user data."""
    response.headers['Content-Security-Policy'] = "frame-ancestors 'none'"
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Cache-Control'] = 'no-store'
    return response


@blueprint.route('/user/register', methods=['POST'])
def register() -> Response:
    """Register a new user, and log them in."""
    return respond(*authentication.register(get_services(), get_body(),
                                            get_client()))


@blueprint.route('/user/login', methods=['POST'])
def login() -> Response:
    """Log in with a username and password."""
    return respond(*authentication.login(get_services(), get_body(),
                                         get_client()))


@blueprint.route('/user/logout', methods=['POST'])
def logout() -> Response:
    """Log out of the current session."""
    return respond(*authentication.logout(get_services(), get_client()))


@blueprint.route('/user/reset', methods=['POST'])
def reset_password() -> Response:
    """Request a password reset code by e-mail."""
    return respond(*authentication.reset_password(get_services(),
                                                  get_body()))


@blueprint.route('/users', methods=['GET'])
def get_users() -> Response:
    """List users."""
    return respond(*users.get_users(get_services(), get_client(),
                                    request.args))


@blueprint.route('/user/add', methods=['POST'])
def add_user() -> Response:
    """Add a user on someone else's behalf."""
    body = request.get_json(silent=True)
    if isinstance(body, dict) and isinstance(body.get('user'), dict):
        form_data = as_form(body['user'])
    else:
        form_data = get_body()
    return respond(*users.add_user(get_services(), get_client(), form_data))


@blueprint.route('/user/<string:user_id>', methods=['GET'])
def get_user(user_id: str) -> Response:
    """Get a user."""
    return respond(*users.get_user(get_services(), get_client(), user_id))


@blueprint.route('/user/<string:user_id>', methods=['PUT'])
def update_user(user_id: str) -> Response:
    """Change fields on a user."""
    return respond(*users.update_user(get_services(), get_client(), user_id,
                                      get_body()))


@blueprint.route('/user/<string:user_id>', methods=['DELETE'])
def delete_user(user_id: str) -> Response:
    """Delete a user."""
    return respond(*users.delete_user(get_services(), get_client(), user_id))


@blueprint.route('/status', methods=['GET'])
def service_status(*args: Any, **kwargs: Any) -> Response:
    """Health check: is the credential store reachable?"""
    if not util.is_available():
        raise ServiceUnavailable('Database is unavailable')
    return make_response(jsonify({'status': 'OK'}), 200)
