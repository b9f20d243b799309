# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Image loading at the system boundary."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageOps

from .errors import InvalidImageSource
from .models import ImageSource

logger = logging.getLogger(__name__)


def load_image_source(path: Union[str, Path]) -> Optional[ImageSource]:
    """Decode ``path`` into an :class:`ImageSource`.

    Returns ``None`` when the file is missing, cannot be decoded or holds no
    pixels. EXIF orientation is applied so region coordinates match the
    upright image.
    """
    path = Path(path)
    try:
        with Image.open(path.as_posix()) as opened:
            opened.load()
            image = ImageOps.exif_transpose(opened)
        return ImageSource.from_pil(image)
    except (OSError, InvalidImageSource) as exc:
        logger.warning("could not load image %s: %s", path, exc)
        return None
