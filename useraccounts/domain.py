"""Defines user concepts for the user accounts service."""

from typing import Any, Optional, NamedTuple, Sequence
from datetime import datetime

from . import logging

logger = logging.getLogger(__name__)


class Level:
    """Privilege levels that a user may hold."""

    ADMIN = 'admin'
    """May list, add, read, update and delete any user."""

    USER = 'user'
    """May read, update and delete only their own record."""

    ALL = (ADMIN, USER)


class Session(NamedTuple):
    """
    A login session bound to a client fingerprint.

    A session is valid only for the exact ``(session_id, ip, browser)``
    triple under which it was issued. Sessions never expire on their own;
    they end on logout or when a later login from the same ``ip`` and
    ``browser`` replaces them.
    """

    session_id: str
    """Hex-encoded random token. Also the value of the session cookie."""

    ip: str
    """The IP address of the client for which the session was created."""

    browser: str
    """Browser family of the client, e.g. ``Firefox``."""


class User(NamedTuple):
    """Represents a registered user and their active sessions."""

    username: str
    """Unique login name."""

    email: Optional[str] = None
    """Primary e-mail address, unique when present."""

    user_id: Optional[str] = None
    """Unique identifier for the user. If ``None``, the user does not exist."""

    level: str = Level.USER
    """One of :attr:`Level.ALL`."""

    register_date: Optional[datetime] = None
    """When the account was created."""

    last_login_date: Optional[datetime] = None
    """When the user last logged in with a password."""

    sessions: Sequence[Session] = ()
    """Active sessions, in the order in which they were created."""

    password: Optional[str] = None
    """Password hash. Never set on a record that leaves the services."""

    reset_code: Optional[str] = None
    """Pending password reset code, if one was requested."""

    session_id: Optional[str] = None
    """The session token of the caller, attached by login operations."""

    @property
    def is_admin(self) -> bool:
        """Whether the user holds the :attr:`Level.ADMIN` level."""
        return self.level == Level.ADMIN

    def strip(self) -> 'User':
        """Get a copy of this user without the password hash or reset code."""
        return self._replace(password=None, reset_code=None)

    def with_session(self, session_id: str) -> 'User':
        """Get a stripped copy of this user carrying ``session_id``."""
        return self.strip()._replace(session_id=session_id)


# Helpers and private functions.


def to_dict(obj: tuple) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    Calls ``_asdict`` on the instance and on any child NamedTuple instances
    (recursively) so that the entire tree is cast to ``dict``. Datetimes are
    rendered in ISO-8601.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    data = obj._asdict()  # type: ignore
    _data = {}

    def _cast(obj: Any) -> Any:
        if hasattr(obj, '_asdict'):
            obj = to_dict(obj)
        elif isinstance(obj, datetime):
            obj = obj.isoformat()
        elif isinstance(obj, (list, tuple)):
            obj = [_cast(o) for o in obj]
        return obj

    for key, value in data.items():
        _data[key] = _cast(value)
    return _data


def to_public_dict(user: User) -> dict:
    """
    Generate the representation of a user that may be sent to a client.

    Secrets are removed, and only the session that the client itself holds
    (see :attr:`User.session_id`) keeps its token. Other sessions are
    described by fingerprint alone.
    """
    data = to_dict(user.strip())
    data.pop('password', None)
    data.pop('reset_code', None)
    data['sessions'] = [
        {'ip': s.ip, 'browser': s.browser,
         **({'session_id': s.session_id}
            if s.session_id == user.session_id else {})}
        for s in user.sessions
    ]
    return data
