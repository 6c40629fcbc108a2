"""
Exceptions raised by the user accounts service.

Each exception that can reach a client carries a ``reason``, which is the
short machine-readable string rendered in failure responses.
"""


class UserAccountsError(RuntimeError):
    """Base class for user accounts exceptions."""

    reason = 'error'


class ValidationFailed(UserAccountsError, ValueError):
    """Input does not satisfy the constraints of the operation."""

    reason = 'invalidBody'


class UserExists(UserAccountsError):
    """A user with the same username or e-mail address already exists."""

    reason = 'userExists'


class NoSuchUser(UserAccountsError):
    """User does not exist."""

    reason = 'userNotFound'


class AuthenticationFailed(UserAccountsError):
    """Failed to authenticate user with provided credentials."""

    reason = 'loginFail'


class NotAuthorized(UserAccountsError):
    """The caller is not permitted to perform the requested operation."""

    reason = 'notAuthorized'


class ResetPasswordFailed(UserAccountsError):
    """Could not generate or store a password reset code."""

    reason = 'resetPasswordFail'


class StoreError(UserAccountsError):
    """A read or write against the credential store failed."""


class Unavailable(StoreError):
    """The credential store is temporarily unavailable."""


class TokenGenerationFailed(UserAccountsError):
    """The random source could not produce a token."""


class SessionUnknown(UserAccountsError):
    """Failed to locate a session in the credential store."""
