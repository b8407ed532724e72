"""
Instant Film — Safety & Resource Guards
Preflight checks run before a file enters the pipeline.
Prevents oversized uploads, non-image inputs and decompression bombs.
"""

import os
from pathlib import Path

# --- Configurable Limits ---
MAX_FILE_MB = 50               # Maximum input file size
MAX_IMAGE_PIXELS = 64_000_000  # Decoded pixel limit per image (~8000x8000)
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff"}


class SafetyError(Exception):
    """Raised when a preflight check fails."""
    pass


def _check_size(size_bytes: int, name: str) -> float:
    size_mb = size_bytes / (1024 * 1024)
    if size_mb > MAX_FILE_MB:
        raise SafetyError(
            f"{name} is {size_mb:.0f}MB, exceeds {MAX_FILE_MB}MB limit."
        )
    return size_mb


def _check_extension(name: str) -> str:
    ext = Path(name).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise SafetyError(
            f"File type '{ext or name}' not allowed. "
            f"Supported: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )
    return ext


def preflight(input_path: str) -> dict:
    """Run all safety checks before reading a file from disk.

    Args:
        input_path: Path to the input image.

    Returns:
        dict with file metadata (path, size_mb, extension).

    Raises:
        SafetyError: If any check fails.
        FileNotFoundError: If input doesn't exist.
    """
    input_path = str(input_path)
    real_path = os.path.realpath(input_path)

    # 1. File exists
    if not os.path.isfile(real_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    # 2. File extension check
    ext = _check_extension(real_path)

    # 3. File size check
    size_mb = _check_size(os.path.getsize(real_path), input_path)

    return {
        "path": real_path,
        "size_mb": size_mb,
        "extension": ext,
    }


def check_upload(filename: str, size_bytes: int) -> None:
    """Validate an uploaded file before it is handed to the pipeline.

    Raises:
        SafetyError: Missing name, disallowed type, empty or oversized upload.
    """
    if not filename:
        raise SafetyError("No filename provided")
    _check_extension(filename)
    if size_bytes == 0:
        raise SafetyError(f"{filename} is empty")
    _check_size(size_bytes, filename)
