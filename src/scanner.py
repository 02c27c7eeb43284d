import logging
from typing import Optional

from activity_schema import HistoryEntry
from constants import GENERIC_FAILURE_MESSAGE
from errors import FitSnapError
from extractor import ExtractionClient
from image_io import ImageInput, coerce_image
from session_store import SessionStore

logger = logging.getLogger(__name__)


class ScanService:
    """Runs one screenshot through the extraction client and records the outcome on the session."""

    def __init__(self, store: SessionStore, client: ExtractionClient) -> None:
        self.store = store
        self.client = client

    def submit(self, image: ImageInput) -> Optional[HistoryEntry]:
        if not self.store.begin_extraction():
            logger.warning("Ignoring screenshot submitted while another scan is running.")
            return None

        try:
            encoded = coerce_image(image)
            self.store.select_image(encoded)
            result = self.client.extract(encoded)
        except FitSnapError as exc:
            self.store.fail_extraction(str(exc) or GENERIC_FAILURE_MESSAGE)
            return None
        except Exception as exc:
            logger.exception("Unexpected scan failure: %s", exc)
            self.store.fail_extraction(GENERIC_FAILURE_MESSAGE)
            return None

        return self.store.complete_extraction(encoded, result)
