"""Tests for :mod:`useraccounts.controllers.authentication`."""

from unittest import TestCase, mock

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest, Unauthorized, Forbidden, \
    Conflict, NotFound, InternalServerError

from ...config import Settings
from ...domain import User, Session
from ...exceptions import AuthenticationFailed, UserExists, NoSuchUser, \
    ResetPasswordFailed
from ...fingerprint import Client
from ...services import UserApp, AuthService, UserService
from .. import authentication

TOKEN = 'a' * 64
CLIENT = Client(ip='10.0.0.1', browser='Firefox')
ALICE = User(username='alice', user_id='2', email='a@x.com',
             sessions=[Session(TOKEN, '10.0.0.1', 'Firefox')],
             session_id=TOKEN)


def _services() -> UserApp:
    auth = mock.MagicMock(spec=AuthService)
    auth.settings = Settings(session_cookie_max_age=1000)
    auth.login_user_with_token.return_value = None
    return UserApp(auth=auth, users=mock.MagicMock(spec=UserService))


class TestRegister(TestCase):
    """Tests for :func:`.authentication.register`."""

    def test_register(self):
        """The new user is logged in."""
        services = _services()
        services.auth.login_user.return_value = ALICE
        data, code, _ = authentication.register(
            services,
            MultiDict({'username': 'alice', 'password': 'pw123',
                       'email': 'a@x.com'}),
            CLIENT
        )
        self.assertEqual(code, 201)
        self.assertEqual(data['user']['user_id'], '2')
        self.assertNotIn('password', data['user'])
        self.assertEqual(data['cookies'],
                         {authentication.SESSION_COOKIE: (TOKEN, 1000)})
        services.auth.register_user.assert_called_once_with(
            'alice', 'pw123', 'a@x.com'
        )
        services.auth.login_user.assert_called_once_with(
            'alice', 'pw123', '10.0.0.1', 'Firefox'
        )

    def test_missing_fields(self):
        """Username and password are required."""
        services = _services()
        with self.assertRaises(BadRequest) as ctx:
            authentication.register(services, MultiDict({'username': 'a'}),
                                    CLIENT)
        self.assertEqual(ctx.exception.description, 'invalidBody')
        services.auth.register_user.assert_not_called()

    def test_exists(self):
        """Taken usernames are a conflict."""
        services = _services()
        services.auth.register_user.side_effect = UserExists('taken')
        with self.assertRaises(Conflict) as ctx:
            authentication.register(
                services, MultiDict({'username': 'a', 'password': 'b'}),
                CLIENT
            )
        self.assertEqual(ctx.exception.description, 'userExists')


class TestLogin(TestCase):
    """Tests for :func:`.authentication.login`."""

    def test_login(self):
        """A successful login sets the session cookie."""
        services = _services()
        services.auth.login_user.return_value = ALICE
        data, code, _ = authentication.login(
            services, MultiDict({'username': 'alice', 'password': 'pw123'}),
            CLIENT
        )
        self.assertEqual(code, 200)
        self.assertEqual(data['user']['sessions'],
                         [{'session_id': TOKEN, 'ip': '10.0.0.1',
                           'browser': 'Firefox'}])
        self.assertIn('cookies', data)

    def test_bad_credentials(self):
        """Failed logins are reported as ``loginFail``."""
        services = _services()
        services.auth.login_user.side_effect = AuthenticationFailed('no')
        with self.assertRaises(Unauthorized) as ctx:
            authentication.login(
                services, MultiDict({'username': 'alice', 'password': 'x'}),
                CLIENT
            )
        self.assertEqual(ctx.exception.description, 'loginFail')

    def test_already_logged_in(self):
        """A client with a valid session keeps it."""
        services = _services()
        services.auth.login_user_with_token.return_value = ALICE
        client = CLIENT._replace(session_id=TOKEN)
        data, code, _ = authentication.login(services, MultiDict(), client)
        self.assertEqual(code, 200)
        self.assertNotIn('cookies', data)
        self.assertEqual(data['user']['username'], 'alice')
        services.auth.login_user.assert_not_called()
        services.auth.login_user_with_token.assert_called_once_with(
            TOKEN, '10.0.0.1', 'Firefox'
        )

    def test_missing_fields(self):
        """Username and password are required."""
        with self.assertRaises(BadRequest):
            authentication.login(_services(), MultiDict({'username': 'a'}),
                                 CLIENT)


class TestLogout(TestCase):
    """Tests for :func:`.authentication.logout`."""

    def test_logout(self):
        """The session is removed and the cookie expired."""
        services = _services()
        services.auth.login_user_with_token.return_value = ALICE
        data, code, _ = authentication.logout(
            services, CLIENT._replace(session_id=TOKEN)
        )
        self.assertEqual(code, 200)
        self.assertEqual(data['cookies'],
                         {authentication.SESSION_COOKIE: ('', 0)})
        services.auth.logout_user.assert_called_once_with(TOKEN)

    def test_not_logged_in(self):
        """Only logged in clients may log out."""
        services = _services()
        with self.assertRaises(Forbidden) as ctx:
            authentication.logout(services, CLIENT)
        self.assertEqual(ctx.exception.description, 'notLoggedIn')
        services.auth.logout_user.assert_not_called()


class TestResetPassword(TestCase):
    """Tests for :func:`.authentication.reset_password`."""

    def test_reset(self):
        """A reset is requested for the address."""
        services = _services()
        data, code, _ = authentication.reset_password(
            services, MultiDict({'email': 'a@x.com'})
        )
        self.assertEqual(code, 200)
        services.auth.reset_password.assert_called_once_with('a@x.com')

    def test_unknown(self):
        """Unknown addresses are not found."""
        services = _services()
        services.auth.reset_password.side_effect = NoSuchUser('nope')
        with self.assertRaises(NotFound) as ctx:
            authentication.reset_password(services,
                                          MultiDict({'email': 'a@x.com'}))
        self.assertEqual(ctx.exception.description, 'userNotFound')

    def test_failure(self):
        """Failures to store a code are server errors."""
        services = _services()
        services.auth.reset_password.side_effect = ResetPasswordFailed('no')
        with self.assertRaises(InternalServerError) as ctx:
            authentication.reset_password(services,
                                          MultiDict({'email': 'a@x.com'}))
        self.assertEqual(ctx.exception.description, 'resetPasswordFail')
