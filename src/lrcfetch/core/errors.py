# core/errors.py
"""Exceptions raised by lrcfetch."""
from __future__ import annotations

from typing import Optional


class LrcFetchError(Exception):
    """Base exception for lrcfetch."""
    pass


class NetworkError(LrcFetchError):
    """A request kept failing at the transport level until retries ran out."""
    pass


class ResponseError(LrcFetchError):
    """LRCLIB answered with an error body (or with a status we do not know)."""

    def __init__(self, status_code: Optional[int], error: str, message: str):
        super().__init__(f"{error}: {message}")
        self.status_code = status_code
        self.error = error
        self.message = message

    @classmethod
    def unknown(cls) -> "ResponseError":
        return cls(None, "UnknownError", "Unknown error happened")


class LyricsNotFoundError(LrcFetchError):
    """Nothing usable exists upstream for the requested track."""

    def __init__(self, message: str = "This track does not exist in LRCLIB database"):
        super().__init__(message)


class TrackNotFoundError(LrcFetchError, LookupError):
    """The catalog has no track with the given id."""
    pass
