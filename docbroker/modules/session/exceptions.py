"""Errors raised by the client-side session orchestrator."""

from typing import Optional


class SessionError(Exception):
    """A session transition failed; the session has been returned to empty."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BrokerRequestError(SessionError):
    """The broker answered with an error status or could not be reached."""

    pass


class SessionExpiredError(BrokerRequestError):
    """The broker rejected the access token (401/403); credentials were discarded."""

    pass


class NotAuthenticatedError(SessionError):
    """An operation that needs credentials was attempted without logging in."""

    pass


class TransitionInProgressError(SessionError):
    """A load or clear was requested while another transition is still running."""

    pass
