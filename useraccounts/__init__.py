"""
User account management.

Registration, password login, session-bound re-authentication, logout,
password reset, and authorization-gated management of user records. The
Flask application is built by :func:`useraccounts.factory.create_web_app`.
"""

from .domain import User, Session, Level
