"""Errors raised while talking to ESPN or running a sync."""

from __future__ import annotations


class ESPNClientError(RuntimeError):
    pass


class InvalidLeagueError(ESPNClientError, ValueError):
    pass


class ESPNRequestError(ESPNClientError):
    pass


class ESPNStatusError(ESPNClientError):
    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ESPNRateLimitedError(ESPNStatusError):
    pass


class ESPNDecodeError(ESPNClientError):
    pass


class EventNotFoundError(ESPNStatusError):
    pass


class EventParseError(ValueError):
    pass


class SyncCancelled(RuntimeError):
    pass
