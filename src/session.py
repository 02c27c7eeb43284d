from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from activity_schema import HistoryEntry
from image_io import EncodedImage


class View(str, Enum):
    UPLOAD = "upload"
    HISTORY = "history"


@dataclass
class Session:
    entries: List[HistoryEntry] = field(default_factory=list)
    busy: bool = False
    last_error: Optional[str] = None
    active_view: View = View.UPLOAD
    selected_image: Optional[EncodedImage] = None
