"""Sends password reset e-mail."""

from typing import Optional
from email.message import EmailMessage
import smtplib

from . import logging

logger = logging.getLogger(__name__)

RESET_SUBJECT = 'Password Reset Request'


class MailSession(object):
    """An SMTP service that we can send messages through."""

    def __init__(self, host: str = "", port: int = 0,
                 username: Optional[str] = None,
                 password: Optional[str] = None,
                 use_tls: bool = False) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port)

    def send_message(self, message: EmailMessage) -> None:
        """Open a connection, send ``message``, and close the connection."""
        with self._new_connection() as conn:
            if self._use_tls:
                conn.starttls()
            if self._username:
                conn.login(self._username, self._password or '')
            conn.send_message(message)


class ResetMailer:
    """Composes and sends password reset messages."""

    def __init__(self, session: MailSession, sender: str,
                 reset_url: str) -> None:
        self.session = session
        self.sender = sender
        self.reset_url = reset_url

    def compose(self, email: str, code: str) -> EmailMessage:
        """Build the reset message for ``email`` carrying ``code``."""
        link = f'{self.reset_url}?code={code}'
        message = EmailMessage()
        message['Subject'] = RESET_SUBJECT
        message['From'] = self.sender
        message['To'] = email
        message.set_content(
            'You are receiving this because you (or someone else) have '
            'requested the reset of the password for your account.\n\n'
            'Please click on the following link, or paste it into your '
            'browser, to complete the process:\n\n'
            f'{link}\n\n'
            'If you did not request this, please ignore this email and your '
            'password will remain unchanged.\n'
        )
        return message

    def send_reset(self, email: str, code: str) -> None:
        """Send a reset message. Errors propagate to the caller."""
        self.session.send_message(self.compose(email, code))
        logger.info('Sent password reset message')
