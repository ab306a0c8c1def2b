# ui/workers/lyrics_download_worker.py
from __future__ import annotations

import logging

from PySide6.QtCore import QThread, Signal

from lrcfetch.core.commands import DownloadOutcome, download_lyrics, download_lyrics_batch
from lrcfetch.core.lrclib_client import LrcLibClient
from lrcfetch.db.database import connect

logger = logging.getLogger(__name__)


class LyricsDownloadWorker(QThread):
    progress = Signal(str)
    finished = Signal(bool, str, int)  # ok, msg, track_id

    def __init__(self, db_path: str, track_id: int, client: LrcLibClient | None = None, parent=None):
        super().__init__(parent)
        self.db_path = db_path
        self.track_id = track_id
        self.client = client

    def run(self):
        db = None
        try:
            # sqlite connections must be opened inside the thread that uses them
            db = connect(self.db_path)
            self.progress.emit("Querying LRCLIB...")
            message = download_lyrics(db, self.track_id, self.client)
            self.finished.emit(True, message, self.track_id)
        except Exception as e:
            logger.exception("Download failed for track %s", self.track_id)
            self.finished.emit(False, f"Download failed: {e}", self.track_id)
        finally:
            if db is not None:
                db.close()


class DownloadQueueWorker(QThread):
    """Downloads lyrics for many tracks; one track failing does not stop the rest."""
    track_done = Signal(object)        # DownloadOutcome
    progress = Signal(int, int)        # processed, total
    finished = Signal(bool, str)       # ok, summary

    def __init__(
        self,
        db_path: str,
        track_ids: list[int],
        client: LrcLibClient | None = None,
        max_workers: int = 4,
        parent=None,
    ):
        super().__init__(parent)
        self.db_path = db_path
        self.track_ids = list(track_ids)
        self.client = client
        self.max_workers = max_workers

    def run(self):
        total = len(self.track_ids)
        processed = 0

        def on_progress(outcome: DownloadOutcome) -> None:
            nonlocal processed
            processed += 1
            self.track_done.emit(outcome)
            self.progress.emit(processed, total)

        db = None
        try:
            db = connect(self.db_path)
            outcomes = download_lyrics_batch(
                db, self.track_ids, self.client, max_workers=self.max_workers, on_progress=on_progress
            )
        except Exception as e:
            logger.exception("Lyrics queue aborted")
            self.finished.emit(False, f"Download queue failed: {e}")
            return
        finally:
            if db is not None:
                db.close()

        counts = {status: sum(1 for o in outcomes if o.status == status) for status in ("success", "skipped", "failure")}
        self.finished.emit(
            True,
            f"{counts['success']} downloaded, {counts['skipped']} skipped, {counts['failure']} failed",
        )
