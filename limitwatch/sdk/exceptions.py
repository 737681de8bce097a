"""Exception hierarchy for the LimitWatch SDK."""

from __future__ import annotations


class ClientFetchError(Exception):
    """A refresh cycle could not obtain a snapshot.

    Covers network failures, non-2xx answers and malformed bodies.
    ``status_code`` is set only when the server answered.
    """

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)
