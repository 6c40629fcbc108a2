"""Controllers for reading and managing user records."""

from typing import Optional, List

from werkzeug.datastructures import MultiDict

from wtforms import StringField, PasswordField, IntegerField, Form
from wtforms.validators import DataRequired, Length, AnyOf, NumberRange
from wtforms import validators

from retry import retry

from .. import logging
from ..domain import User, Level, to_public_dict
from ..exceptions import UserAccountsError, Unavailable
from ..fingerprint import Client
from ..services import UserApp
from . import ResponseData, to_http, invalid_body
from .authentication import current_user

logger = logging.getLogger(__name__)


class AddUserForm(Form):
    """An admin creates a user."""

    username = StringField('Username',
                           validators=[DataRequired(), Length(max=255)])
    password = PasswordField('Password', validators=[DataRequired()])
    email = StringField('E-mail',
                        validators=[validators.Optional(), Length(max=255)])
    level = StringField('Level',
                        validators=[validators.Optional(), AnyOf(Level.ALL)])


class UpdateUserForm(Form):
    """Change some fields of a user. Absent fields stay as they are."""

    username = StringField('Username',
                           validators=[validators.Optional(),
                                       Length(max=255)])
    password = PasswordField('Password', validators=[validators.Optional()])
    email = StringField('E-mail',
                        validators=[validators.Optional(), Length(max=255)])
    level = StringField('Level',
                        validators=[validators.Optional(), AnyOf(Level.ALL)])


class ListUsersForm(Form):
    """Paging parameters."""

    limit = IntegerField('Limit', validators=[validators.Optional(),
                                              NumberRange(min=0)])
    offset = IntegerField('Offset', validators=[validators.Optional(),
                                                NumberRange(min=0)])


def get_user(services: UserApp, client: Client, user_id: str) -> ResponseData:
    """Get a single user."""
    caller = current_user(services, client)
    try:
        user = _do_get(services, caller, user_id)
    except UserAccountsError as e:
        raise to_http(e) from e
    return {'user': to_public_dict(_as_seen_by(user, caller))}, 200, {}


def get_users(services: UserApp, client: Client,
              params: MultiDict) -> ResponseData:
    """List users, optionally paged with ``limit`` and ``offset``."""
    form = ListUsersForm(params)
    if not form.validate():
        raise invalid_body()
    caller = current_user(services, client)
    try:
        users = _do_list(services, caller, form.limit.data,
                         form.offset.data or 0)
    except UserAccountsError as e:
        raise to_http(e) from e
    return {'users': [to_public_dict(_as_seen_by(user, caller))
                      for user in users]}, 200, {}


def add_user(services: UserApp, client: Client,
             form_data: MultiDict) -> ResponseData:
    """Create a user on someone else's behalf."""
    form = AddUserForm(form_data)
    if not form.validate():
        logger.debug('User data is not valid: %s', form.errors)
        raise invalid_body()
    caller = current_user(services, client)
    try:
        user = _do_add(services, caller, form.username.data,
                       form.password.data, form.email.data or None,
                       form.level.data or Level.USER)
    except UserAccountsError as e:
        raise to_http(e) from e
    return {'user': to_public_dict(user)}, 201, {}


def update_user(services: UserApp, client: Client, user_id: str,
                form_data: MultiDict) -> ResponseData:
    """Change fields on a user."""
    form = UpdateUserForm(form_data)
    if not form.validate():
        logger.debug('User data is not valid: %s', form.errors)
        raise invalid_body()
    caller = current_user(services, client)
    try:
        user = _do_update(services, caller, user_id,
                          username=form.username.data or None,
                          email=_present(form_data, 'email', form.email.data),
                          password=form.password.data or None,
                          level=form.level.data or None)
    except UserAccountsError as e:
        raise to_http(e) from e
    return {'user': to_public_dict(_as_seen_by(user, caller))}, 200, {}


def delete_user(services: UserApp, client: Client,
                user_id: str) -> ResponseData:
    """Delete a user."""
    caller = current_user(services, client)
    try:
        _do_delete(services, caller, user_id)
    except UserAccountsError as e:
        raise to_http(e) from e
    return {'success': True}, 200, {}


def _present(form_data: MultiDict, field: str,
             value: Optional[str]) -> Optional[str]:
    """An empty value clears the field; an absent one leaves it alone."""
    if field not in form_data:
        return None
    return value or ''


def _as_seen_by(user: User, caller: Optional[User]) -> User:
    """Let callers see the token of their own session, and no other."""
    if caller is not None and caller.user_id == user.user_id:
        return user._replace(session_id=caller.session_id)
    return user


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_get(services: UserApp, caller: Optional[User], user_id: str) -> User:
    return services.users.get_user(caller, user_id=user_id)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_list(services: UserApp, caller: Optional[User],
             limit: Optional[int], offset: int) -> List[User]:
    return services.users.get_users(caller, limit=limit, offset=offset)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_add(services: UserApp, caller: Optional[User], username: str,
            password: str, email: Optional[str], level: str) -> User:
    return services.users.add_user(caller, username, password, email, level)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_update(services: UserApp, caller: Optional[User], user_id: str,
               **fields: Optional[str]) -> User:
    return services.users.update_user(caller, user_id, **fields)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_delete(services: UserApp, caller: Optional[User],
               user_id: str) -> None:
    services.users.delete_user(caller, user_id)
