# paintmate/model.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple
from paintmate.document import Document
from paintmate.services.history import HistoryManager, DEFAULT_CAPACITY

@dataclass
class Model:
    document: Optional[Document] = None
    history: HistoryManager = field(default_factory=lambda: HistoryManager(DEFAULT_CAPACITY))
    path: Optional[str] = None
    modified: bool = False

    # view
    zoom: float = 1.0
    fullscreen: bool = False

    # brush
    brush_size: float = 10.0
    primary_color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    secondary_color: Tuple[int, int, int, int] = (255, 255, 255, 255)
