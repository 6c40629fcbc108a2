"""
User records in the credential store.

All methods must be called within a Flask application context. Each call
runs in its own :func:`.transaction`, so a failure leaves the store as it
was before the call.
"""

from typing import Optional, List, Any

from sqlalchemy.exc import IntegrityError

from .. import logging
from ..domain import User, Session
from ..exceptions import NoSuchUser, UserExists
from .models import DBUser
from .util import transaction, now, epoch, from_epoch

logger = logging.getLogger(__name__)

UPDATABLE = ('username', 'email', 'password', 'level', 'reset_code',
             'last_login_date')


class UserStore:
    """Reads and writes :class:`.User` records."""

    def find_one(self, user_id: Optional[str] = None,
                 username: Optional[str] = None,
                 email: Optional[str] = None) -> Optional[User]:
        """
        Get the user matching exactly one of ``user_id``, ``username`` or
        ``email``.

        Returns
        -------
        :class:`.User` or None
            The full record, including the password hash.

        """
        with transaction() as session:
            db_user = _find(session, user_id, username, email)
            if db_user is None:
                return None
            return to_domain(db_user)

    def exists(self, username: Optional[str] = None,
               email: Optional[str] = None,
               exclude_user_id: Optional[str] = None) -> bool:
        """Determine whether the username or e-mail is already in use."""
        with transaction() as session:
            for field, value in (('username', username), ('email', email)):
                if value is None:
                    continue
                query = session.query(DBUser) \
                    .filter(getattr(DBUser, field) == value)
                if _as_int(exclude_user_id) is not None:
                    query = query.filter(
                        DBUser.user_id != _as_int(exclude_user_id)
                    )
                if query.first() is not None:
                    return True
        return False

    def insert_one(self, user: User) -> User:
        """
        Store a new user.

        ``user.password`` must already be hashed. Sessions on ``user`` are
        ignored; a new user has none.

        Raises
        ------
        :class:`.UserExists`
            If the username or e-mail address is taken.

        """
        db_user = DBUser(
            username=user.username,
            email=user.email,
            password_enc=user.password,
            level=user.level,
            register_date=epoch(user.register_date)
            if user.register_date else now(),
            last_login_date=0,
            reset_code=user.reset_code
        )
        with transaction() as session:
            session.add(db_user)
            try:
                session.flush()
            except IntegrityError as e:
                raise UserExists(f'User exists: {user.username}') from e
            logger.debug('Inserted user %s', db_user.user_id)
            return to_domain(db_user)

    def update_one(self, user_id: str, **fields: Any) -> User:
        """
        Update fields on an existing user.

        Parameters
        ----------
        user_id : str
        fields : kwargs
            Any of ``username``, ``email``, ``password`` (a hash),
            ``level``, ``reset_code`` and ``last_login_date`` (a datetime).

        Raises
        ------
        :class:`.NoSuchUser`
        :class:`.UserExists`
            If a new username or e-mail address is taken.

        """
        unknown = set(fields) - set(UPDATABLE)
        if unknown:
            raise ValueError(f'Cannot update fields: {sorted(unknown)}')
        with transaction() as session:
            db_user = _find(session, user_id=user_id)
            if db_user is None:
                raise NoSuchUser(f'No user with id {user_id}')
            for field, value in fields.items():
                if field == 'password':
                    db_user.password_enc = value
                elif field == 'last_login_date':
                    db_user.last_login_date = epoch(value) if value else 0
                else:
                    setattr(db_user, field, value)
            try:
                session.flush()
            except IntegrityError as e:
                raise UserExists(f'Update conflicts for {user_id}') from e
            return to_domain(db_user)

    def delete_one(self, user_id: str) -> None:
        """Delete a user and, with it, all of its sessions."""
        with transaction() as session:
            db_user = _find(session, user_id=user_id)
            if db_user is None:
                raise NoSuchUser(f'No user with id {user_id}')
            session.delete(db_user)
        logger.debug('Deleted user %s', user_id)

    def find_many(self, limit: int, offset: int = 0) -> List[User]:
        """Get up to ``limit`` users, in order of registration."""
        with transaction() as session:
            db_users = session.query(DBUser) \
                .order_by(DBUser.user_id) \
                .offset(offset) \
                .limit(limit) \
                .all()
            return [to_domain(db_user) for db_user in db_users]


def to_domain(db_user: DBUser) -> User:
    """Cast a :class:`.DBUser` to a :class:`.User`."""
    return User(
        user_id=str(db_user.user_id),
        username=db_user.username,
        email=db_user.email,
        password=db_user.password_enc,
        level=db_user.level,
        register_date=from_epoch(db_user.register_date),
        last_login_date=from_epoch(db_user.last_login_date),
        reset_code=db_user.reset_code,
        sessions=[Session(s.session_id, s.ip_addr, s.browser)
                  for s in db_user.sessions]
    )


def _as_int(user_id: Any) -> Optional[int]:
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None


def _find(session: Any, user_id: Optional[str] = None,
          username: Optional[str] = None,
          email: Optional[str] = None) -> Optional[DBUser]:
    query = session.query(DBUser)
    if user_id is not None:
        if _as_int(user_id) is None:
            return None
        query = query.filter(DBUser.user_id == _as_int(user_id))
    elif username is not None:
        query = query.filter(DBUser.username == username)
    elif email is not None:
        query = query.filter(DBUser.email == email)
    else:
        raise ValueError('Must pass user_id, username, or email')
    db_user: Optional[DBUser] = query.first()
    return db_user
