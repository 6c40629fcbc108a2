"""Testing helpers."""

from contextlib import contextmanager
from flask import Flask
from .. import util


@contextmanager
def temporary_db(database_url: str = 'sqlite:///:memory:',
                 create: bool = True, drop: bool = True):
    """Provide an in-memory sqlite database for testing purposes."""
    app = Flask('foo')
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    util.init_app(app)
    with app.app_context():
        if create:
            util.create_all()
        try:
            yield util.current_session()
        finally:
            if drop:
                util.drop_all()
