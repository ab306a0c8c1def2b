from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, TypeVar

import requests

from lrcfetch.core.errors import LyricsNotFoundError, NetworkError, ResponseError
from lrcfetch.core.models import (
    Challenge,
    LyricsResult,
    NoLyrics,
    RawLyrics,
    SearchCandidate,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INSTANCE = "https://lrclib.net"
DEFAULT_USER_AGENT = "lrcfetch/0.1"
REQUEST_TIMEOUT = 30
MAX_RETRIES = 3
RETRY_DELAY = 1.0  # seconds, multiplied by the attempt number

# Statuses whose body carries {statusCode?, error, message}
_ERROR_BODY_STATUSES = {400, 500, 503}


# Connection, timeout and request-build failures. HTTP statuses never get here.
_TRANSIENT_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidHeader,
)


def is_transient_error(exc: BaseException) -> bool:
    """
    Anything that kept the request from being built or sent is worth another
    try; a bad instance URL fails after the last attempt as a NetworkError.
    """
    return isinstance(exc, _TRANSIENT_ERRORS)


def send_with_retry(
    send: Callable[[], T],
    *,
    is_transient: Callable[[BaseException], bool] = is_transient_error,
    max_retries: int = MAX_RETRIES,
    retry_delay: float = RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call `send` up to `max_retries` times.

    Only errors the classifier deems transient are retried, with a linear
    backoff of retry_delay * attempt between attempts. Other errors propagate
    untouched. When every attempt failed, NetworkError is raised from the
    last transient error.
    """
    last_err: Optional[BaseException] = None
    for attempt in range(1, max_retries + 1):
        try:
            return send()
        except Exception as e:
            if not is_transient(e):
                raise
            logger.warning("Request failed (attempt %d/%d): %s", attempt, max_retries, e)
            last_err = e
            if attempt < max_retries:
                sleep(retry_delay * attempt)

    raise NetworkError(f"Request failed after {max_retries} attempts: {last_err}") from last_err


class LrcLibClient:
    """
    Typed access to an LRCLIB instance.

    The requests.Session is the shared connection pool; one client can be used
    from many worker threads at once.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_INSTANCE,
        session: Optional[requests.Session] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = (base_url or DEFAULT_INSTANCE).rstrip("/")
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": user_agent})
        self.session = session
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep = sleep

    # -------------------------------
    # TRANSPORT
    # -------------------------------
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _get(self, path: str, params: Optional[dict] = None) -> requests.Response:
        url = self._url(path)
        return send_with_retry(
            lambda: self.session.get(url, params=params, timeout=self.timeout),
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            sleep=self.sleep,
        )

    def _post(self, path: str, json_body: Any = None, headers: Optional[dict] = None) -> requests.Response:
        url = self._url(path)
        return send_with_retry(
            lambda: self.session.post(url, json=json_body, headers=headers, timeout=self.timeout),
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            sleep=self.sleep,
        )

    @staticmethod
    def _json(r: requests.Response) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise ResponseError(r.status_code, "InvalidResponse", f"Malformed JSON body: {e}") from e

    @staticmethod
    def _raise_for_error(r: requests.Response) -> None:
        """Turn a non-success status into ResponseError. Never returns."""
        if r.status_code in _ERROR_BODY_STATUSES:
            try:
                body = r.json()
                error, message = body["error"], body["message"]
            except (ValueError, KeyError, TypeError):
                raise ResponseError(r.status_code, "UnknownError", (r.text or "")[:200])
            raise ResponseError(body.get("statusCode", r.status_code), error, message)
        raise ResponseError.unknown()

    # -------------------------------
    # GET
    # -------------------------------
    def _get_lyrics_response(self, title: str, album: str, artist: str, duration: float) -> requests.Response:
        # GET /api/get?track_name=&artist_name=&album_name=&duration=
        params = {
            "track_name": title,
            "artist_name": artist,
            "album_name": album,
            "duration": int(round(duration or 0.0)),
        }
        return self._get("/api/get", params=params)

    def get_lyrics(self, title: str, album: str, artist: str, duration: float) -> LyricsResult:
        r = self._get_lyrics_response(title, album, artist, duration)
        if r.status_code == 200:
            return RawLyrics.from_json(self._json(r)).to_result()
        if r.status_code == 404:
            return NoLyrics()
        self._raise_for_error(r)

    def get_lyrics_raw(self, title: str, album: str, artist: str, duration: float) -> RawLyrics:
        r = self._get_lyrics_response(title, album, artist, duration)
        return self._raw_or_not_found(r)

    def get_lyrics_by_id(self, lyrics_id: int) -> LyricsResult:
        r = self._get(f"/api/get/{int(lyrics_id)}")
        if r.status_code == 200:
            return RawLyrics.from_json(self._json(r)).to_result()
        if r.status_code == 404:
            return NoLyrics()
        self._raise_for_error(r)

    def get_lyrics_by_id_raw(self, lyrics_id: int) -> RawLyrics:
        r = self._get(f"/api/get/{int(lyrics_id)}")
        return self._raw_or_not_found(r)

    def _raw_or_not_found(self, r: requests.Response) -> RawLyrics:
        if r.status_code == 200:
            raw = RawLyrics.from_json(self._json(r))
            if raw.is_empty():
                raise LyricsNotFoundError("There is no lyrics for this track")
            return raw
        if r.status_code == 404:
            raise LyricsNotFoundError("There is no lyrics for this track")
        self._raise_for_error(r)

    # -------------------------------
    # SEARCH
    # -------------------------------
    def search(self, title: str, album: str, artist: str, q: str) -> list[SearchCandidate]:
        # all four params are always sent, empty ones included
        params = {
            "track_name": title,
            "artist_name": artist,
            "album_name": album,
            "q": q,
        }
        r = self._get("/api/search", params=params)
        if r.status_code != 200:
            self._raise_for_error(r)

        data = self._json(r)
        if not isinstance(data, list):
            raise ResponseError(r.status_code, "InvalidResponse", "Expected a list of search results")
        return [SearchCandidate.from_json(item) for item in data]

    # -------------------------------
    # PUBLISH / FLAG
    # -------------------------------
    def request_challenge(self) -> Challenge:
        r = self._post("/api/request-challenge")
        if r.status_code != 200:
            self._raise_for_error(r)
        data = self._json(r)
        return Challenge(prefix=data["prefix"], target=data["target"])

    def publish(
        self,
        title: str,
        album: str,
        artist: str,
        duration: float,
        plain_lyrics: str,
        synced_lyrics: str,
        publish_token: str,
    ) -> None:
        body = {
            "trackName": title,
            "albumName": album,
            "artistName": artist,
            "duration": float(round(duration)),
            "plainLyrics": plain_lyrics,
            "syncedLyrics": synced_lyrics,
        }
        r = self._post("/api/publish", json_body=body, headers={"X-Publish-Token": publish_token})
        if r.status_code != 201:
            self._raise_for_error(r)

    def flag(self, track_id: int, reason: str, publish_token: str) -> None:
        body = {"trackId": int(track_id), "reason": reason}
        r = self._post("/api/flag", json_body=body, headers={"X-Publish-Token": publish_token})
        if r.status_code != 201:
            self._raise_for_error(r)
