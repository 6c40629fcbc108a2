"""Credential store database models."""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, ForeignKey, Integer, String, \
    UniqueConstraint, text
from sqlalchemy.orm import relationship

db: SQLAlchemy = SQLAlchemy()


class DBUser(db.Model):  # type: ignore
    """
    User accounts.

    +-----------------+--------------+------+-----+---------+----------------+
    | Field           | Type         | Null | Key | Default | Extra          |
    +-----------------+--------------+------+-----+---------+----------------+
    | user_id         | int(11)      | NO   | PRI | NULL    | auto_increment |
    | username        | varchar(255) | NO   | UNI | NULL    |                |
    | email           | varchar(255) | YES  | UNI | NULL    |                |
    | password_enc    | varchar(60)  | NO   |     | NULL    |                |
    | level           | varchar(16)  | NO   |     | user    |                |
    | register_date   | int(11)      | NO   |     | 0       |                |
    | last_login_date | int(11)      | NO   |     | 0       |                |
    | reset_code      | varchar(64)  | YES  |     | NULL    |                |
    +-----------------+--------------+------+-----+---------+----------------+
    """

    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    email = Column(String(255), nullable=True, unique=True)
    password_enc = Column(String(60), nullable=False)
    level = Column(String(16), nullable=False, server_default=text("'user'"))
    register_date = Column(Integer, nullable=False,
                           server_default=text("'0'"))
    last_login_date = Column(Integer, nullable=False,
                             server_default=text("'0'"))
    reset_code = Column(String(64), nullable=True)

    sessions = relationship('DBUserSession', back_populates='user',
                            cascade='all, delete-orphan',
                            order_by='DBUserSession.id')


class DBUserSession(db.Model):  # type: ignore
    """
    Sessions embedded in a user. One row per ``(token, ip, browser)``.

    +------------+--------------+------+-----+---------+----------------+
    | Field      | Type         | Null | Key | Default | Extra          |
    +------------+--------------+------+-----+---------+----------------+
    | id         | int(11)      | NO   | PRI | NULL    | auto_increment |
    | user_id    | int(11)      | NO   | MUL | NULL    |                |
    | session_id | varchar(64)  | NO   | MUL | NULL    |                |
    | ip_addr    | varchar(64)  | NO   |     | ''      |                |
    | browser    | varchar(64)  | NO   |     | ''      |                |
    +------------+--------------+------+-----+---------+----------------+
    """

    __tablename__ = 'user_sessions'
    __table_args__ = (
        UniqueConstraint('user_id', 'session_id', 'ip_addr', 'browser'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('users.user_id', ondelete='CASCADE'),
                     nullable=False, index=True)
    session_id = Column(String(64), nullable=False, index=True)
    ip_addr = Column(String(64), nullable=False, server_default=text("''"))
    browser = Column(String(64), nullable=False, server_default=text("''"))

    user = relationship('DBUser', back_populates='sessions')
