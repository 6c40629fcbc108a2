"""Tests for :mod:`useraccounts.authorization`."""

from unittest import TestCase

from ..domain import User, Level
from ..exceptions import NotAuthorized
from .. import authorization

ADMIN = User(username='root', user_id='1', level=Level.ADMIN)
ALICE = User(username='alice', user_id='2', level=Level.USER)


class TestAuthorize(TestCase):
    """Tests for :func:`.authorize`."""

    def test_admin_only(self):
        """Listing and adding users is reserved to admins."""
        for operation in [authorization.LIST_ALL_USERS,
                          authorization.ADD_ARBITRARY_USER]:
            self.assertTrue(authorization.authorize(ADMIN, operation))
            self.assertFalse(authorization.authorize(ALICE, operation))
            self.assertFalse(authorization.authorize(ALICE, operation, '2'),
                             'Acting on oneself does not help')

    def test_self_or_admin(self):
        """Users may act on themselves, admins on anyone."""
        for operation in [authorization.GET_USER,
                          authorization.DELETE_USER,
                          authorization.UPDATE_USER]:
            self.assertTrue(authorization.authorize(ALICE, operation, '2'))
            self.assertFalse(authorization.authorize(ALICE, operation, '1'))
            self.assertFalse(authorization.authorize(ALICE, operation))
            self.assertTrue(authorization.authorize(ADMIN, operation, '2'))
            self.assertTrue(authorization.authorize(ADMIN, operation, '1'))

    def test_anonymous(self):
        """Nobody is authorized without a caller."""
        self.assertFalse(
            authorization.authorize(None, authorization.GET_USER, '2')
        )
        self.assertFalse(
            authorization.authorize(None, authorization.LIST_ALL_USERS)
        )

    def test_unknown_operation(self):
        """Operations must be known."""
        with self.assertRaises(ValueError):
            authorization.authorize(ADMIN, 'dropDatabase')


class TestRequire(TestCase):
    """Tests for :func:`.require`."""

    def test_denied(self):
        """A negative result raises an exception."""
        with self.assertRaises(NotAuthorized) as ctx:
            authorization.require(ALICE, authorization.DELETE_USER, '1')
        self.assertEqual(ctx.exception.reason, 'notAuthorized')

    def test_allowed(self):
        """A positive result passes silently."""
        self.assertIsNone(
            authorization.require(ALICE, authorization.DELETE_USER, '2')
        )
