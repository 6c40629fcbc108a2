"""Flask configuration and typed service settings."""

from typing import NamedTuple, Mapping, Any, Optional
import os

SECRET_KEY = os.environ.get('SECRET_KEY', 'asdf1234')
"""Flask secret key."""

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///useraccounts.db')
"""Where the credential store lives."""

SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = bool(int(os.environ.get('CREATE_DB', '0')))
"""If set, tables are created when the application starts."""

SESSION_COOKIE_NAME_USER = os.environ.get('SESSION_COOKIE_NAME_USER',
                                          'sessionId')
"""Name of the cookie that carries the session token."""

SESSION_COOKIE_MAX_AGE = int(os.environ.get('SESSION_COOKIE_MAX_AGE',
                                            str(60 * 60 * 24 * 365 * 10)))
"""
Lifetime of the session cookie, in seconds.

Sessions themselves do not expire; the cookie is simply long-lived.
"""

SESSION_COOKIE_SECURE = bool(int(os.environ.get('SESSION_COOKIE_SECURE',
                                                '1')))
"""If set, the session cookie is only sent over HTTPS."""

BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', '10'))
"""Work factor for password hashing."""

TOKEN_SIZE = int(os.environ.get('TOKEN_SIZE', '32'))
"""Number of random bytes in session tokens and reset codes."""

USERS_PAGE_SIZE = int(os.environ.get('USERS_PAGE_SIZE', '25'))
"""Default number of users returned when listing."""

MAIL_SERVER = os.environ.get('MAIL_SERVER', 'localhost')
MAIL_PORT = int(os.environ.get('MAIL_PORT', '25'))
MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
MAIL_USE_TLS = bool(int(os.environ.get('MAIL_USE_TLS', '0')))

MAIL_SENDER = os.environ.get('MAIL_SENDER', 'no-reply@localhost')
"""From address for password reset messages."""

RESET_PASSWORD_URL = os.environ.get('RESET_PASSWORD_URL',
                                    'http://localhost:5000/reset')
"""Page linked from password reset messages. The code is appended."""

MAIL_ENABLED = bool(int(os.environ.get('MAIL_ENABLED', '1')))
"""If unset, password reset codes are stored but no mail is sent."""

PROXY_FIX_X_FOR = int(os.environ.get('PROXY_FIX_X_FOR', '0'))
"""Number of trusted proxies setting ``X-Forwarded-For``."""


class Settings(NamedTuple):
    """Typed settings consumed by the services."""

    token_size: int = 32
    bcrypt_rounds: int = 10
    users_page_size: int = 25
    session_cookie_name: str = 'sessionId'
    session_cookie_max_age: int = 60 * 60 * 24 * 365 * 10
    session_cookie_secure: bool = True
    reset_password_url: str = 'http://localhost:5000/reset'
    mail_sender: str = 'no-reply@localhost'
    mail_server: str = 'localhost'
    mail_port: int = 25
    mail_username: Optional[str] = None
    mail_password: Optional[str] = None
    mail_use_tls: bool = False
    mail_enabled: bool = True

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'Settings':
        """Build settings from a Flask config, falling back to defaults."""
        defaults = cls()
        return cls(
            token_size=int(config.get('TOKEN_SIZE', defaults.token_size)),
            bcrypt_rounds=int(config.get('BCRYPT_ROUNDS',
                                         defaults.bcrypt_rounds)),
            users_page_size=int(config.get('USERS_PAGE_SIZE',
                                           defaults.users_page_size)),
            session_cookie_name=config.get('SESSION_COOKIE_NAME_USER',
                                           defaults.session_cookie_name),
            session_cookie_max_age=int(config.get(
                'SESSION_COOKIE_MAX_AGE', defaults.session_cookie_max_age
            )),
            session_cookie_secure=bool(config.get(
                'SESSION_COOKIE_SECURE', defaults.session_cookie_secure
            )),
            reset_password_url=config.get('RESET_PASSWORD_URL',
                                          defaults.reset_password_url),
            mail_sender=config.get('MAIL_SENDER', defaults.mail_sender),
            mail_server=config.get('MAIL_SERVER', defaults.mail_server),
            mail_port=int(config.get('MAIL_PORT', defaults.mail_port)),
            mail_username=config.get('MAIL_USERNAME'),
            mail_password=config.get('MAIL_PASSWORD'),
            mail_use_tls=bool(config.get('MAIL_USE_TLS',
                                         defaults.mail_use_tls)),
            mail_enabled=bool(config.get('MAIL_ENABLED',
                                         defaults.mail_enabled))
        )
