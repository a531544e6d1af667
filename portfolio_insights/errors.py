"""Errors surfaced by a dashboard query."""

from __future__ import annotations


class InsightsError(Exception):
    """Base error; the message is shown to the user as-is."""


class InvalidInputError(InsightsError):
    """Input text is not a GitHub profile or repository link (-> HTTP 400)."""

    def __init__(self, message: str = "Paste a valid GitHub profile or repo URL") -> None:
        super().__init__(message)


class NotFoundError(InsightsError):
    """Named repository is not in the owner's repo list (-> HTTP 404)."""


class TransportError(InsightsError):
    """Network failure, non-2xx status or unparseable body from GitHub (-> HTTP 502)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
