"""One-time process-wide initialisation of the image engine."""
from __future__ import annotations

import logging
import threading

from PIL import Image

logger = logging.getLogger(__name__)


_INIT_LOCK = threading.Lock()


_initialized = False


def ensure_engine_initialized() -> None:
    """Register every Pillow codec plugin exactly once per process."""

    global _initialized
    if _initialized:
        return
    with _INIT_LOCK:
        if _initialized:
            return
        Image.init()
        logger.debug("Image engine initialised with %d decoders", len(Image.OPEN))
        _initialized = True  # pyright: ignore[reportConstantRedefinition]


def engine_initialized() -> bool:
    """Return True once :func:`ensure_engine_initialized` has completed."""

    return _initialized
