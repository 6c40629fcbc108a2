"""
Registration, login, logout and password reset.

A credential-based login moves through the steps ``LookupUser ->
VerifyPassword -> InvalidateStaleSessionsForFingerprint -> IssueSession ->
StripSecrets``. A failure in either of the first two steps is reported to
the caller as :class:`.AuthenticationFailed` regardless of which check
failed, so that callers cannot probe for usernames. The log records the
specific cause.

Removing stale sessions and adding the new session are two separate store
operations. Two simultaneous logins from the same client may therefore
leave either one or two sessions behind.
"""

from typing import Optional
from datetime import datetime
from smtplib import SMTPException

from pytz import UTC

from .. import logging
from ..config import Settings
from ..domain import User, Level
from ..exceptions import AuthenticationFailed, NoSuchUser, UserExists, \
    ValidationFailed, StoreError, SessionUnknown, TokenGenerationFailed, \
    ResetPasswordFailed
from ..mail import ResetMailer
from ..passwords import PasswordHasher
from ..store.sessions import SessionManager
from ..store.users import UserStore

logger = logging.getLogger(__name__)


class AuthService:
    """Authenticates users and manages their sessions."""

    def __init__(self, users: UserStore, sessions: SessionManager,
                 hasher: PasswordHasher,
                 mailer: Optional[ResetMailer] = None,
                 settings: Optional[Settings] = None) -> None:
        self.users = users
        self.sessions = sessions
        self.hasher = hasher
        self.mailer = mailer
        self.settings = settings or Settings()

    def register_user(self, username: str, password: str,
                      email: Optional[str] = None,
                      level: str = Level.USER) -> User:
        """
        Create a new user account.

        Parameters
        ----------
        username : str
        password : str
            Plaintext. Only the hash is stored.
        email : str
            Optional; must be unique when given.
        level : str
            Privilege level. Self-registration always uses ``user``.

        Returns
        -------
        :class:`.User`
            The stored record, without password hash.

        Raises
        ------
        :class:`.ValidationFailed`
        :class:`.UserExists`

        """
        if not username:
            raise ValidationFailed('Username is required')
        if level not in Level.ALL:
            raise ValidationFailed(f'Unknown level: {level}')
        email = email or None
        if self.users.exists(username=username):
            logger.debug('Username %s is taken', username)
            raise UserExists(f'User exists: {username}')
        if email is not None and self.users.exists(email=email):
            logger.debug('E-mail for %s is taken', username)
            raise UserExists(f'E-mail address in use: {email}')

        hashed = self.hasher.hash(password)
        user = self.users.insert_one(User(
            username=username,
            email=email,
            password=hashed,
            level=level,
            register_date=datetime.now(tz=UTC)
        ))
        logger.info('Registered user %s', user.user_id)
        return user.strip()

    def login_user(self, username: str, password: str, ip: str,
                   browser: str) -> User:
        """
        Authenticate with a username (or e-mail) and password.

        Any previous session from the same ``ip`` and ``browser`` is
        replaced by the new one.

        Returns
        -------
        :class:`.User`
            Without password hash, with :attr:`.User.session_id` set to the
            new session token.

        Raises
        ------
        :class:`.AuthenticationFailed`
            If the user is unknown or the password is wrong.
        :class:`.TokenGenerationFailed`
        :class:`.StoreError`

        """
        user = self._lookup(username)
        if user is None:
            logger.debug('Login failed: no such user %s', username)
            raise AuthenticationFailed('Invalid username or password')
        if not self.hasher.verify(password, user.password or ''):
            logger.debug('Login failed: bad password for %s', user.user_id)
            raise AuthenticationFailed('Invalid username or password')

        try:
            self.sessions.remove_sessions_by_fingerprint(user.user_id, ip,
                                                         browser)
        except StoreError as e:
            logger.warning('Could not remove stale sessions for %s: %s',
                           user.user_id, e)

        token = self.sessions.generate_token()
        self.users.update_one(user.user_id,
                              last_login_date=datetime.now(tz=UTC))
        self.sessions.add_session(user.user_id, token, ip, browser)
        logger.info('User %s logged in from %s', user.user_id, ip)

        current = self.users.find_one(user_id=user.user_id) or user
        return current.with_session(token)

    def login_user_with_token(self, token: Optional[str],
                              ip: Optional[str],
                              browser: Optional[str]) -> Optional[User]:
        """
        Re-authenticate with an existing session token.

        The token is valid only from the ``ip`` and ``browser`` under which
        it was issued. No new token is generated.

        Returns
        -------
        :class:`.User` or None
            ``None`` if no session matches.

        """
        if not token or ip is None or browser is None:
            return None
        user = self.sessions.find_user_by_fingerprinted_token(token, ip,
                                                              browser)
        if user is None:
            logger.debug('No session matches the presented token')
            return None
        return user.with_session(token)

    def logout_user(self, token: Optional[str]) -> bool:
        """Remove the session carrying ``token``. True if one was removed."""
        if not token:
            return False
        try:
            self.sessions.remove_session_by_token(token)
        except SessionUnknown:
            logger.debug('Logout with unknown session token')
            return False
        return True

    def reset_password(self, email: str) -> bool:
        """
        Generate, store and send a password reset code.

        Sending is fire-and-forget: if the message cannot be sent, the code
        stays stored and the failure is only logged.

        Raises
        ------
        :class:`.NoSuchUser`
            If no user has ``email``.
        :class:`.ResetPasswordFailed`
            If a code could not be generated or stored.

        """
        if not email:
            raise ValidationFailed('E-mail address is required')
        user = self.users.find_one(email=email)
        if user is None:
            logger.debug('Password reset for unknown address')
            raise NoSuchUser('No user with that e-mail address')
        try:
            code = self.sessions.generate_token()
            self.users.update_one(user.user_id, reset_code=code)
        except (TokenGenerationFailed, StoreError) as e:
            logger.error('Could not store reset code for %s: %s',
                         user.user_id, e)
            raise ResetPasswordFailed('Could not reset password') from e
        logger.info('Stored password reset code for %s', user.user_id)

        if self.mailer is not None and self.settings.mail_enabled:
            try:
                self.mailer.send_reset(email, code)
            except (SMTPException, OSError) as e:
                logger.error('Could not send reset message to %s: %s',
                             user.user_id, e)
        return True

    def _lookup(self, username: str) -> Optional[User]:
        if not username:
            return None
        user = self.users.find_one(username=username)
        if user is None and '@' in username:
            user = self.users.find_one(email=username)
        return user
