import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from activity_schema import AnalysisResult, HistoryEntry
from image_io import EncodedImage
from session import Session, View

logger = logging.getLogger(__name__)


class SessionStore:
    """Owns one session's scan history and its transient UI state.

    History lives in memory only. A store is meant for a single owning UI; the
    lock only guards against the worker thread that finishes an extraction.
    """

    def __init__(self, session: Optional[Session] = None) -> None:
        self.session = session or Session()
        self._lock = threading.Lock()

    # Extraction lifecycle -------------------------------------------------

    def begin_extraction(self) -> bool:
        """Mark an extraction as in flight; returns False if one already is."""
        with self._lock:
            if self.session.busy:
                logger.debug("Extraction already in progress; rejecting new submission.")
                return False
            self.session.busy = True
            self.session.last_error = None
            return True

    def complete_extraction(self, image: EncodedImage, result: AnalysisResult) -> HistoryEntry:
        with self._lock:
            timestamp = datetime.now(timezone.utc)
            if self.session.entries and self.session.entries[0].timestamp > timestamp:
                timestamp = self.session.entries[0].timestamp
            entry = HistoryEntry(id=uuid.uuid4().hex, timestamp=timestamp, image=image, result=result)
            self.session.entries.insert(0, entry)
            self.session.busy = False
            self.session.active_view = View.UPLOAD
            self.session.selected_image = image
        logger.info("Stored scan %s (%s)", entry.id, result.activity_kind.value)
        return entry

    def fail_extraction(self, reason: str) -> None:
        with self._lock:
            self.session.busy = False
            self.session.last_error = reason
        logger.info("Extraction failed: %s", reason)

    # History --------------------------------------------------------------

    def delete_entry(self, entry_id: str) -> bool:
        with self._lock:
            remaining = [entry for entry in self.session.entries if entry.id != entry_id]
            if len(remaining) == len(self.session.entries):
                return False
            self.session.entries[:] = remaining
        logger.info("Deleted scan %s", entry_id)
        return True

    def latest(self) -> Optional[HistoryEntry]:
        with self._lock:
            return self.session.entries[0] if self.session.entries else None

    def entries(self) -> List[HistoryEntry]:
        with self._lock:
            return list(self.session.entries)

    def count(self) -> int:
        with self._lock:
            return len(self.session.entries)

    def get_entry(self, entry_id: str) -> Optional[HistoryEntry]:
        with self._lock:
            return next((entry for entry in self.session.entries if entry.id == entry_id), None)

    # View state -----------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self.session.busy

    @property
    def last_error(self) -> Optional[str]:
        return self.session.last_error

    @property
    def active_view(self) -> View:
        return self.session.active_view

    @property
    def selected_image(self) -> Optional[EncodedImage]:
        return self.session.selected_image

    def set_view(self, view: View) -> None:
        with self._lock:
            self.session.active_view = View(view)

    def select_image(self, image: Optional[EncodedImage]) -> None:
        with self._lock:
            self.session.selected_image = image

    def show_entry(self, entry_id: str) -> bool:
        """Preview a past scan's screenshot on the Upload view."""
        entry = self.get_entry(entry_id)
        if not entry:
            return False
        with self._lock:
            self.session.selected_image = entry.image
            self.session.active_view = View.UPLOAD
        return True
