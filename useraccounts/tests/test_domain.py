"""Tests for :mod:`useraccounts.domain`."""

from unittest import TestCase
from datetime import datetime

from pytz import UTC

from .. import domain


class TestUser(TestCase):
    """Tests for :class:`.domain.User`."""

    def setUp(self):
        self.user = domain.User(
            username='alice',
            email='a@x.com',
            user_id='1',
            password='$2b$10$hash',
            reset_code='c0de',
            register_date=datetime(2020, 1, 1, tzinfo=UTC),
            sessions=[domain.Session('t1', '10.0.0.1', 'Firefox'),
                      domain.Session('t2', '10.0.0.2', 'Chrome')]
        )

    def test_strip(self):
        """Secrets are removed."""
        stripped = self.user.strip()
        self.assertIsNone(stripped.password)
        self.assertIsNone(stripped.reset_code)
        self.assertEqual(stripped.username, 'alice')

    def test_with_session(self):
        """A login result carries its token and no secrets."""
        user = self.user.with_session('t1')
        self.assertEqual(user.session_id, 't1')
        self.assertIsNone(user.password)

    def test_is_admin(self):
        """Only the admin level is admin."""
        self.assertFalse(self.user.is_admin)
        self.assertTrue(self.user._replace(level=domain.Level.ADMIN).is_admin)

    def test_public_dict(self):
        """Only the caller's own session keeps its token."""
        data = domain.to_public_dict(self.user.with_session('t1'))
        self.assertNotIn('password', data)
        self.assertNotIn('reset_code', data)
        self.assertEqual(data['sessions'], [
            {'ip': '10.0.0.1', 'browser': 'Firefox', 'session_id': 't1'},
            {'ip': '10.0.0.2', 'browser': 'Chrome'}
        ])
        self.assertEqual(data['register_date'], '2020-01-01T00:00:00+00:00')


class TestDictConversion(TestCase):
    """Tests for :func:`.domain.to_dict`."""

    def test_to_dict(self):
        """Nested sessions are converted, and datetimes are ISO-8601."""
        user = domain.User(username='bob', user_id='2',
                           last_login_date=datetime(2021, 5, 6, tzinfo=UTC),
                           sessions=[domain.Session('t', '1.2.3.4', 'IE')])
        data = domain.to_dict(user)
        self.assertEqual(data['sessions'],
                         [{'session_id': 't', 'ip': '1.2.3.4',
                           'browser': 'IE'}])
        self.assertEqual(data['last_login_date'],
                         '2021-05-06T00:00:00+00:00')

    def test_no_sessions(self):
        """A user without sessions renders an empty list."""
        self.assertEqual(domain.to_dict(domain.User('bob'))['sessions'], [])

    def test_not_a_namedtuple(self):
        """Other objects produce an empty dict."""
        self.assertEqual(domain.to_dict({'foo': 'bar'}), {})


class TestDefaults(TestCase):
    """Defaults are not shared between users."""

    def test_sessions_default(self):
        """The default sessions cannot be changed in place."""
        alice = domain.User('alice')
        bob = domain.User('bob')
        self.assertEqual(alice.sessions, ())
        with self.assertRaises(AttributeError):
            alice.sessions.append(domain.Session('t', '10.0.0.1', 'IE'))
        self.assertEqual(bob.sessions, ())
