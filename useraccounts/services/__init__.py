"""Service layer: authentication and gated user management."""

from typing import NamedTuple

from .auth import AuthService
from .users import UserService


class UserApp(NamedTuple):
    """The services that make up one running application."""

    auth: AuthService
    users: UserService
