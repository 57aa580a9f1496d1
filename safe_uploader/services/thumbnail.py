"""
Thumbnail Service - Single Responsibility: derive size-bounded images.

Uses Pillow to scale an image to the biggest size that fits the bounds while
keeping its aspect ratio.
"""
from pathlib import Path
from typing import Optional, Tuple
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from ..protocols import IThumbnailer

logger = logging.getLogger(__name__)


class ThumbnailService(IThumbnailer):
    """Biggest-fit thumbnail generator."""

    def __init__(self, quality: int = 90):
        self._quality = quality

    @staticmethod
    def fit_size(
        size: Tuple[int, int],
        max_width: Optional[int],
        max_height: Optional[int],
    ) -> Tuple[int, int]:
        """
        Biggest (width, height) with the ratio of ``size`` fitting the bounds.

        A missing bound leaves that axis unconstrained.
        """
        width, height = size
        ratios = []
        if max_width:
            ratios.append(max_width / width)
        if max_height:
            ratios.append(max_height / height)
        ratio = min(ratios) if ratios else 1.0
        return max(1, round(width * ratio)), max(1, round(height * ratio))

    def fit_within_bounds(
        self,
        src: str,
        dst: str,
        max_width: Optional[int],
        max_height: Optional[int],
    ) -> bool:
        try:
            with Image.open(src) as image:
                source_format = image.format
                image = ImageOps.exif_transpose(image)
                target = self.fit_size(image.size, max_width, max_height)
                thumb = image.resize(target, Image.Resampling.LANCZOS)

                # JPEG cannot store alpha
                suffix = Path(dst).suffix.lower()
                if suffix in (".jpg", ".jpeg") and thumb.mode not in ("RGB", "L"):
                    thumb = thumb.convert("RGB")

                save_kwargs = {}
                if suffix in (".jpg", ".jpeg", ".webp"):
                    save_kwargs["quality"] = self._quality
                thumb.save(dst, format=None if suffix else source_format, **save_kwargs)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error(f"[thumbs] Cannot create {dst} from {src}: {e}")
            return False

        logger.debug(f"[thumbs] {src} -> {dst} ({target[0]}x{target[1]})")
        return True
