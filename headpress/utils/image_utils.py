# headpress/utils/image_utils.py
import logging
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Formats whose header carries the pixel size; SVG has none.
SIZED_FORMATS = frozenset({"PNG", "GIF", "JPEG", "WEBP"})


def image_dimensions(data: bytes) -> Optional[Tuple[int, int]]:
    """
    Reads (width, height) from the image header without decoding pixels.

    Returns None for formats without a fixed size or unreadable bytes.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            if img.format not in SIZED_FORMATS:
                return None
            return img.size
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not read image header: {e}")
        return None
