"""
Credential store.

User records and their embedded sessions live in a relational database,
accessed through SQLAlchemy. See :mod:`.users` and :mod:`.sessions`.
"""

from .models import db
from .sessions import SessionManager
from .users import UserStore
