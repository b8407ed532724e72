"""
Instant Film — Archive Packager
Bundles finished results into a single ZIP byte stream.
"""

import zipfile
import zlib
from io import BytesIO
from pathlib import PurePosixPath

ARCHIVE_FILENAME = "instant-film-photos.zip"


class PackagingError(Exception):
    """ZIP archive could not be built. The batch itself is unaffected."""
    pass


def _unique_name(name: str, taken: set) -> str:
    """Return name, or 'stem (n).ext' if name is already in the archive."""
    if name not in taken:
        return name
    path = PurePosixPath(name)
    n = 2
    while True:
        candidate = f"{path.stem} ({n}){path.suffix}"
        if candidate not in taken:
            return candidate
        n += 1


def pack(entries) -> bytes:
    """Build a deflated ZIP with one member per result.

    Each member is named after the result's output filename and holds its
    PNG bytes unchanged. Colliding filenames get a ' (n)' suffix so no
    entry is dropped.

    Args:
        entries: Sequence of ProcessedResult.

    Returns:
        ZIP bytes, or b"" when there is nothing to pack.

    Raises:
        PackagingError: On any compression or write failure.
    """
    entries = list(entries)
    if not entries:
        return b""

    buf = BytesIO()
    taken = set()
    try:
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for entry in entries:
                name = _unique_name(entry.filename, taken)
                taken.add(name)
                zf.writestr(name, entry.data)
    except (zipfile.BadZipFile, zlib.error, OSError, ValueError, TypeError) as e:
        raise PackagingError(f"Archive creation failed: {e}") from e
    return buf.getvalue()
