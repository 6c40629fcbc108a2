"""
Decides whether a caller may perform a user management operation.

Two policies apply. Listing users and adding users on someone else's behalf
are reserved for admins. Reading, updating and deleting a user are allowed
on one's own record, and on any record for admins.
"""

from typing import Optional

from . import logging
from .domain import User
from .exceptions import NotAuthorized

logger = logging.getLogger(__name__)

LIST_ALL_USERS = 'listAllUsers'
"""List every user in the store."""

ADD_ARBITRARY_USER = 'addArbitraryUser'
"""Create a user other than by self-registration."""

GET_USER = 'getUser'
"""Read a user record."""

DELETE_USER = 'deleteUser'
"""Delete a user record."""

UPDATE_USER = 'updateUser'
"""Change fields on a user record."""

ADMIN_ONLY = frozenset([LIST_ALL_USERS, ADD_ARBITRARY_USER])
SELF_OR_ADMIN = frozenset([GET_USER, DELETE_USER, UPDATE_USER])


def authorize(caller: Optional[User], operation: str,
              target_user_id: Optional[str] = None) -> bool:
    """
    Determine whether ``caller`` may perform ``operation``.

    Parameters
    ----------
    caller : :class:`.User` or None
        The authenticated user. Anonymous callers are never authorized.
    operation : str
        One of the operation constants in this module.
    target_user_id : str
        The user on whom the operation acts; required for self-or-admin
        operations.

    Returns
    -------
    bool

    Raises
    ------
    ValueError
        If ``operation`` is not known.

    """
    if operation not in ADMIN_ONLY and operation not in SELF_OR_ADMIN:
        raise ValueError(f'Unknown operation: {operation}')
    if caller is None:
        return False
    if caller.is_admin:
        return True
    if operation in ADMIN_ONLY:
        return False
    return target_user_id is not None \
        and caller.user_id is not None \
        and str(caller.user_id) == str(target_user_id)


def require(caller: Optional[User], operation: str,
            target_user_id: Optional[str] = None) -> None:
    """Raise :class:`.NotAuthorized` unless :func:`authorize` passes."""
    if not authorize(caller, operation, target_user_id):
        logger.debug('Authorizer returned negative result for %s on %s',
                     operation, target_user_id)
        raise NotAuthorized(f'Not authorized to {operation}')
