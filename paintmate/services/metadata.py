# paintmate/services/metadata.py
from __future__ import annotations
import os
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from paintmate.document import Document


def human_size(n: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0; f = float(n)
    while f >= 1024 and i < len(units) - 1:
        f /= 1024; i += 1
    return f"{f:.2f} {units[i]}"


def describe(doc: Optional[Document], *, path: Optional[str] = None,
             modified: bool = False, zoom: float = 1.0) -> str:
    """Status text for the info panel (no Tk here)."""
    if doc is None:
        return "No image"
    active = doc.get_active_layer()
    # every layer holds one RGBA buffer of the document size
    mem = doc.width * doc.height * 4 * len(doc.layers)

    parts = [
        f"{doc.width} × {doc.height}",
        f"Zoom: {zoom * 100:.0f}%",
        f"Layers: {len(doc.layers)} (active: {active.name}, {active.blend_mode.value}, {active.opacity * 100:.0f}%)",
        f"Memory: {human_size(mem)}",
    ]
    if modified:
        parts.append("Modified")
    parts.append(os.path.basename(path) if path else "Untitled")
    return "  |  ".join(parts)
