"""
Instant Film — Image Pipeline
decode -> two-stage resample -> film effect stack -> PNG encode.

A request either yields a complete ProcessedResult or raises; nothing
partial is ever returned.
"""

from io import BytesIO
from pathlib import PurePosixPath

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from core.models import ProcessingRequest, ProcessedResult
from core.raster import image_to_frame, frame_to_image, frame_size, RasterError
from core.resample import resize
from core.safety import MAX_IMAGE_PIXELS
from effects import apply_film_stack

Image.MAX_IMAGE_PIXELS = MAX_IMAGE_PIXELS

OUTPUT_PREFIX = "instant-film-"
OUTPUT_SUFFIX = ".png"
FALLBACK_STEM = "untitled"


class DecodeError(Exception):
    """Input bytes are not a readable image."""
    pass


class EncodeError(Exception):
    """Styled frame could not be encoded as PNG."""
    pass


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes into an RGBA frame, honoring EXIF orientation.

    Multi-frame formats (GIF, TIFF) contribute their first frame.

    Raises:
        DecodeError: Empty, truncated, unrecognized or oversized input.
    """
    if not data:
        raise DecodeError("Empty input")
    try:
        img = Image.open(BytesIO(data))
        # Pillow only raises above twice its limit; hold the line at the limit
        if Image.MAX_IMAGE_PIXELS and img.width * img.height > Image.MAX_IMAGE_PIXELS:
            raise DecodeError(
                f"Image is {img.width}x{img.height}, exceeds {Image.MAX_IMAGE_PIXELS} pixel limit"
            )
        img = ImageOps.exif_transpose(img)
        frame = image_to_frame(img)
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise DecodeError(str(e)) from e
    except (OSError, ValueError, SyntaxError, EOFError) as e:
        # Pillow plugins report broken headers/streams with a mix of these
        raise DecodeError(f"Corrupt image data: {e}") from e
    if frame.shape[0] == 0 or frame.shape[1] == 0:
        raise DecodeError("Image has no pixels")
    return frame


def encode_png(frame: np.ndarray) -> bytes:
    """Encode an RGBA frame as PNG bytes.

    Raises:
        EncodeError: If the frame is malformed or Pillow fails to write it.
    """
    try:
        img = frame_to_image(frame)
        buf = BytesIO()
        img.save(buf, format="PNG")
    except (RasterError, OSError, ValueError) as e:
        raise EncodeError(f"PNG encoding failed: {e}") from e
    return buf.getvalue()


def output_filename(original: str) -> str:
    """instant-film-<name without its final extension>.png

    Directory components are dropped. A name with no extension is kept
    whole; a name that is only an extension falls back to 'untitled'.
    """
    name = PurePosixPath((original or "").replace("\\", "/")).name
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return f"{OUTPUT_PREFIX}{stem or FALLBACK_STEM}{OUTPUT_SUFFIX}"


def process(request: ProcessingRequest, rng=None) -> ProcessedResult:
    """Turn one input file into a finished instant-film PNG.

    Args:
        request: Filename, raw bytes and monochrome flag.
        rng: Random source for the effect stack (shared default if None).

    Returns:
        ProcessedResult with the same pixel dimensions as the source.

    Raises:
        DecodeError: Source bytes are not a readable image.
        EncodeError: Output could not be encoded.
    """
    source = decode_image(request.data)
    width, height = frame_size(source)

    frame = resize(source, width, height)
    frame = apply_film_stack(frame, monochrome=request.monochrome, rng=rng)

    return ProcessedResult(
        filename=output_filename(request.filename),
        data=encode_png(frame),
        width=width,
        height=height,
    )
