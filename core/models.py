"""
Instant Film — Data Model

ProcessingRequest is created per input file and consumed by the pipeline.
ProcessedResult is self-contained (filename + PNG bytes) and safe to keep
for as long as the batch holds it.
"""

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProcessingRequest:
    """One input file awaiting processing.

    filename: Name as supplied by the user (may include directories).
    data: Raw encoded image bytes.
    monochrome: Grayscale grade instead of the warm film grade.
    """
    filename: str
    data: bytes = field(repr=False)
    monochrome: bool = False


@dataclass(frozen=True)
class ProcessedResult:
    """A finished instant-film image.

    result_id is an opaque per-result identity; filenames can collide when
    two inputs share a base name.
    """
    filename: str
    data: bytes = field(repr=False)
    width: int
    height: int
    result_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    media_type: str = "image/png"

    def info(self) -> dict:
        """Serializable metadata (no image bytes)."""
        return {
            "id": self.result_id,
            "filename": self.filename,
            "width": self.width,
            "height": self.height,
            "size_bytes": len(self.data),
            "media_type": self.media_type,
        }
