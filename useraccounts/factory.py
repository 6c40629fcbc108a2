"""Application factory for the user accounts app."""

from typing import Optional, Mapping, Any

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException, Forbidden, Unauthorized, \
    BadRequest, MethodNotAllowed, InternalServerError, NotFound, Conflict, \
    ServiceUnavailable
from werkzeug.middleware.proxy_fix import ProxyFix

from . import logging
from .config import Settings
from .controllers import to_http
from .exceptions import UserAccountsError
from .mail import MailSession, ResetMailer
from .passwords import PasswordHasher
from .routes import blueprint
from .services import UserApp, AuthService, UserService
from .store import util
from .store.sessions import SessionManager
from .store.users import UserStore

logger = logging.getLogger(__name__)


def create_web_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Initialize and configure the user accounts application.

    Parameters
    ----------
    config : dict
        Overrides for values in :mod:`useraccounts.config`.

    """
    app = Flask('useraccounts')
    app.config.from_object('useraccounts.config')
    if config:
        app.config.update(config)

    if app.config.get('PROXY_FIX_X_FOR'):
        app.wsgi_app = ProxyFix(app.wsgi_app,  # type: ignore
                                x_for=app.config['PROXY_FIX_X_FOR'])

    util.init_app(app)
    app.extensions['useraccounts'] = build_services(Settings.from_config(
        app.config
    ))
    app.register_blueprint(blueprint)

    if app.config['CREATE_DB']:
        with app.app_context():
            util.create_all()

    register_error_handlers(app)
    return app


def build_services(settings: Settings) -> UserApp:
    """Construct the services and their collaborators, once."""
    users = UserStore()
    hasher = PasswordHasher(settings.bcrypt_rounds)
    sessions = SessionManager(token_size=settings.token_size)
    mailer = ResetMailer(
        MailSession(settings.mail_server, settings.mail_port,
                    settings.mail_username, settings.mail_password,
                    settings.mail_use_tls),
        sender=settings.mail_sender,
        reset_url=settings.reset_password_url
    )
    auth = AuthService(users, sessions, hasher, mailer, settings)
    return UserApp(auth=auth,
                   users=UserService(users, hasher, auth, settings))


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(Forbidden)(jsonify_exception)
    app.errorhandler(Unauthorized)(jsonify_exception)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(Conflict)(jsonify_exception)
    app.errorhandler(ServiceUnavailable)(jsonify_exception)
    app.errorhandler(UserAccountsError)(jsonify_service_error)


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    exc_resp = error.get_response()
    response: Response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def jsonify_service_error(error: UserAccountsError) -> Response:
    """Render a service failure that no controller handled as JSON."""
    logger.error('Unhandled service error: %s', error)
    return jsonify_exception(to_http(error))
