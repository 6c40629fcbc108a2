"""
Session tokens bound to client fingerprints.

A session is the triple ``(token, ip, browser)`` stored on the owning user.
A request authenticates with a token only if it arrives from the same IP
and browser family under which the token was issued. Sessions have no
expiry; they are removed on logout, or by a later login from the same
fingerprint.
"""

from typing import Any, Callable, Optional, List
import secrets

from .. import logging
from ..domain import User, Session
from ..exceptions import NoSuchUser, SessionUnknown, TokenGenerationFailed
from .models import DBUser, DBUserSession
from .users import to_domain, _as_int
from .util import transaction

logger = logging.getLogger(__name__)


class SessionManager:
    """Issues, stores, looks up and revokes session tokens."""

    def __init__(self, token_size: int = 32,
                 random_bytes: Callable[[int], bytes] = secrets.token_bytes
                 ) -> None:
        """
        Parameters
        ----------
        token_size : int
            Number of random bytes per token. Tokens are hex-encoded, so the
            token string is twice as long.
        random_bytes : callable
            Cryptographically secure source of random bytes.

        """
        self._token_size = token_size
        self._random_bytes = random_bytes

    def generate_token(self) -> str:
        """
        Generate a new hex-encoded random token.

        Raises
        ------
        :class:`.TokenGenerationFailed`
            If the random source is unavailable.

        """
        try:
            return self._random_bytes(self._token_size).hex()
        except (OSError, NotImplementedError) as e:
            raise TokenGenerationFailed(f'No randomness: {e}') from e

    def add_session(self, user_id: str, token: str, ip: str,
                    browser: str) -> None:
        """
        Attach a session to a user.

        Adding a triple that the user already holds has no effect.

        Raises
        ------
        :class:`.NoSuchUser`
        :class:`.StoreError`

        """
        with transaction() as session:
            db_user = _get_user(session, user_id)
            existing = session.query(DBUserSession) \
                .filter(DBUserSession.user_id == db_user.user_id) \
                .filter(DBUserSession.session_id == token) \
                .filter(DBUserSession.ip_addr == ip) \
                .filter(DBUserSession.browser == browser) \
                .first()
            if existing is not None:
                return
            db_user.sessions.append(
                DBUserSession(session_id=token, ip_addr=ip, browser=browser)
            )
        logger.debug('Added session for user %s from %s', user_id, ip)

    def remove_sessions_by_fingerprint(self, user_id: str, ip: str,
                                       browser: str) -> int:
        """
        Remove every session of a user that matches ``ip`` and ``browser``.

        Returns
        -------
        int
            The number of sessions removed. Zero is not an error.

        """
        user_pk = _as_int(user_id)
        if user_pk is None:
            return 0
        with transaction() as session:
            removed: int = session.query(DBUserSession) \
                .filter(DBUserSession.user_id == user_pk) \
                .filter(DBUserSession.ip_addr == ip) \
                .filter(DBUserSession.browser == browser) \
                .delete(synchronize_session='fetch')
        if removed:
            logger.debug('Removed %i stale sessions for %s', removed, user_id)
        return removed

    def remove_session_by_token(self, token: str) -> None:
        """
        Remove the session carrying ``token``, whichever user holds it.

        Raises
        ------
        :class:`.SessionUnknown`
            If no session carries ``token``.

        """
        with transaction() as session:
            removed = session.query(DBUserSession) \
                .filter(DBUserSession.session_id == token) \
                .delete(synchronize_session='fetch')
        if not removed:
            raise SessionUnknown('No such session')

    def find_user_by_fingerprinted_token(self, token: str, ip: str,
                                         browser: str) -> Optional[User]:
        """Get the user holding exactly ``(token, ip, browser)``, if any."""
        with transaction() as session:
            db_session = session.query(DBUserSession) \
                .filter(DBUserSession.session_id == token) \
                .filter(DBUserSession.ip_addr == ip) \
                .filter(DBUserSession.browser == browser) \
                .first()
            if db_session is None:
                return None
            return to_domain(db_session.user)

    def sessions_for(self, user_id: str) -> List[Session]:
        """Get the sessions of a user, in the order they were added."""
        with transaction() as session:
            return list(to_domain(_get_user(session, user_id)).sessions)


def _get_user(session: Any, user_id: str) -> DBUser:
    user_pk = _as_int(user_id)
    db_user: Optional[DBUser] = None
    if user_pk is not None:
        db_user = session.query(DBUser) \
            .filter(DBUser.user_id == user_pk) \
            .first()
    if db_user is None:
        raise NoSuchUser(f'No user with id {user_id}')
    return db_user
