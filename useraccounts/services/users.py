"""Authorization-gated reads and writes on user records."""

from typing import Optional, List

from .. import logging, authorization
from ..config import Settings
from ..domain import User, Level
from ..exceptions import NoSuchUser, NotAuthorized, UserExists, \
    ValidationFailed
from ..passwords import PasswordHasher
from ..store.users import UserStore
from .auth import AuthService

logger = logging.getLogger(__name__)


class UserService:
    """
    User management on behalf of an authenticated caller.

    Every operation checks the caller against :mod:`.authorization` before
    it changes anything, and raises :class:`.NotAuthorized` when the check
    fails. Records are always returned without password hash or reset
    code.
    """

    def __init__(self, users: UserStore, hasher: PasswordHasher,
                 auth: AuthService,
                 settings: Optional[Settings] = None) -> None:
        self.users = users
        self.hasher = hasher
        self.auth = auth
        self.settings = settings or Settings()

    def get_user(self, caller: Optional[User],
                 user_id: Optional[str] = None,
                 username: Optional[str] = None,
                 email: Optional[str] = None) -> User:
        """
        Get a single user by id, username or e-mail address.

        When looking up by id the caller is checked first. Otherwise the
        record has to be found before we know whose it is.

        Raises
        ------
        :class:`.NotAuthorized`
        :class:`.NoSuchUser`

        """
        if user_id is not None:
            authorization.require(caller, authorization.GET_USER, user_id)
        elif caller is None:
            raise NotAuthorized('Not authorized to getUser')
        user = self.users.find_one(user_id=user_id, username=username,
                                   email=email)
        if user is None:
            raise NoSuchUser('No such user')
        authorization.require(caller, authorization.GET_USER, user.user_id)
        return user.strip()

    def get_users(self, caller: Optional[User], limit: Optional[int] = None,
                  offset: int = 0) -> List[User]:
        """List users. Admins only."""
        authorization.require(caller, authorization.LIST_ALL_USERS)
        if limit is None:
            limit = self.settings.users_page_size
        if limit < 0 or offset < 0:
            raise ValidationFailed('limit and offset must not be negative')
        return [user.strip() for user in self.users.find_many(limit, offset)]

    def add_user(self, caller: Optional[User], username: str, password: str,
                 email: Optional[str] = None,
                 level: str = Level.USER) -> User:
        """Create a user on someone else's behalf. Admins only."""
        authorization.require(caller, authorization.ADD_ARBITRARY_USER)
        user = self.auth.register_user(username, password, email,
                                       level=level)
        logger.info('User %s added by %s', user.user_id, caller.user_id)
        return user

    def update_user(self, caller: Optional[User], user_id: str,
                    username: Optional[str] = None,
                    email: Optional[str] = None,
                    password: Optional[str] = None,
                    level: Optional[str] = None) -> User:
        """
        Change fields on a user.

        Parameters
        ----------
        caller : :class:`.User`
        user_id : str
        username, email, password, level : str
            Fields to change. ``None`` leaves the field as it is. Only
            admins may change ``level``.

        Raises
        ------
        :class:`.NotAuthorized`
        :class:`.NoSuchUser`
        :class:`.UserExists`
        :class:`.ValidationFailed`

        """
        authorization.require(caller, authorization.UPDATE_USER, user_id)
        changes = {}
        if level is not None:
            if not caller.is_admin:
                raise NotAuthorized('Only admins may change levels')
            if level not in Level.ALL:
                raise ValidationFailed(f'Unknown level: {level}')
            changes['level'] = level
        if username is not None:
            if not username:
                raise ValidationFailed('Username must not be empty')
            if self.users.exists(username=username, exclude_user_id=user_id):
                raise UserExists(f'User exists: {username}')
            changes['username'] = username
        if email is not None:
            if email and self.users.exists(email=email,
                                           exclude_user_id=user_id):
                raise UserExists(f'E-mail address in use: {email}')
            changes['email'] = email or None
        if password is not None:
            changes['password'] = self.hasher.hash(password)

        user = self.users.update_one(user_id, **changes)
        logger.info('User %s updated fields %s', user_id, sorted(changes))
        return user.strip()

    def delete_user(self, caller: Optional[User], user_id: str) -> None:
        """Delete a user together with all of their sessions."""
        authorization.require(caller, authorization.DELETE_USER, user_id)
        self.users.delete_one(user_id)
        logger.info('User %s deleted by %s', user_id, caller.user_id)
