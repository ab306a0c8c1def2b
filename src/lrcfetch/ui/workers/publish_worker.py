# ui/workers/publish_worker.py
from __future__ import annotations

import logging
from concurrent.futures import Executor

from PySide6.QtCore import QThread, Signal

from lrcfetch.core.commands import flag_lyrics, publish_lyrics
from lrcfetch.core.lrclib_client import LrcLibClient

logger = logging.getLogger(__name__)


class PublishWorker(QThread):
    """request challenge -> solve it -> publish, reported step by step."""
    progress = Signal(object)     # PublishProgress
    finished = Signal(bool, str)  # ok, message

    def __init__(self, client: LrcLibClient, payload: dict, executor: Executor | None = None, parent=None):
        super().__init__(parent)
        self.client = client
        self.payload = payload
        self.executor = executor

    def run(self):
        try:
            publish_lyrics(
                self.client,
                title=self.payload["title"],
                album_name=self.payload["album_name"],
                artist_name=self.payload["artist_name"],
                duration=self.payload["duration"],
                plain_lyrics=self.payload.get("plain_lyrics", ""),
                synced_lyrics=self.payload.get("synced_lyrics", ""),
                on_progress=self.progress.emit,
                executor=self.executor,
            )
            self.finished.emit(True, "Published successfully.")
        except Exception as e:
            logger.exception("Publish failed")
            self.finished.emit(False, f"Publish failed: {e}")


class FlagWorker(QThread):
    progress = Signal(object)     # FlagProgress
    finished = Signal(bool, str)  # ok, message

    def __init__(self, client: LrcLibClient, lyrics_id: int, reason: str, executor: Executor | None = None, parent=None):
        super().__init__(parent)
        self.client = client
        self.lyrics_id = lyrics_id
        self.reason = reason
        self.executor = executor

    def run(self):
        try:
            flag_lyrics(
                self.client,
                self.lyrics_id,
                self.reason,
                on_progress=self.progress.emit,
                executor=self.executor,
            )
            self.finished.emit(True, "Lyrics flagged.")
        except Exception as e:
            logger.exception("Flag failed")
            self.finished.emit(False, f"Flag failed: {e}")
