import pytest

from useraccounts import factory
from useraccounts.domain import Level
from useraccounts.store import util


@pytest.fixture()
def app():
    app = factory.create_web_app({
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BCRYPT_ROUNDS': 4,
        'SESSION_COOKIE_SECURE': False,
        'MAIL_ENABLED': False,
        'CREATE_DB': False
    })
    with app.app_context():
        util.create_all()
    # Requests push their own application context, as they do in production.
    yield app
    with app.app_context():
        util.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def services(app):
    return app.extensions['useraccounts']


@pytest.fixture()
def admin(app, services):
    with app.app_context():
        return services.auth.register_user('root', 'rootpw', 'root@x.com',
                                           level=Level.ADMIN)


@pytest.fixture()
def request_context(app):
    yield app.test_request_context(
        environ_base={'REMOTE_ADDR': '127.0.0.1'}
    )
