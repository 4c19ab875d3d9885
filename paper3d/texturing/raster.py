"""
Atlas raster surface.

Owns the single RGBA pixel buffer every shape samples from. All scaling is
nearest-neighbour so painted pixel boundaries stay crisp at any export size.

Every mutating call bumps ``version`` and sets ``dirty``; a render
collaborator re-uploads the texture when it sees the flag and then calls
``mark_clean()``.
"""

import asyncio
import base64
import binascii
import logging
from io import BytesIO
from typing import Tuple, Union

import numpy as np
from PIL import Image, ImageColor, UnidentifiedImageError

from paper3d.exceptions import TextureDecodeError

logger = logging.getLogger(__name__)

Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]

DATA_URL_PREFIX = 'data:image/png;base64,'


def to_rgba(color: Color) -> Tuple[int, int, int, int]:
    """Normalize a CSS colour string or RGB(A) tuple to an RGBA tuple."""
    if isinstance(color, str):
        return ImageColor.getcolor(color, 'RGBA')
    if len(color) == 3:
        return (int(color[0]), int(color[1]), int(color[2]), 255)
    return tuple(int(c) for c in color)


class RasterSurface:
    """Fixed-size RGBA atlas backed by a Pillow image."""

    def __init__(self, size: int = 512, background: Color = '#ffffff'):
        self._size = int(size)
        self.background = to_rgba(background)
        self._image = Image.new('RGBA', (self._size, self._size), self.background)
        self.version = 0
        self.dirty = True

    @property
    def size(self) -> int:
        return self._size

    @property
    def image(self) -> Image.Image:
        """The live image. Mutate only through the surface methods."""
        return self._image

    def _touch(self):
        self.version += 1
        self.dirty = True

    def mark_clean(self):
        """Called by the upload collaborator after syncing the GPU copy."""
        self.dirty = False

    def _clamp(self, value: float) -> int:
        return max(0, min(self._size - 1, int(value)))

    def read_pixel(self, x: float, y: float) -> Tuple[int, int, int, int]:
        return self._image.getpixel((self._clamp(x), self._clamp(y)))

    def write_rect(self, x: int, y: int, width: int, height: int, color: Color) -> bool:
        """
        Fill a rectangle, clipped to the raster.

        Returns:
            False when nothing was left to draw after clipping
        """
        x1 = max(0, int(x))
        y1 = max(0, int(y))
        x2 = min(self._size, int(x) + int(width))
        y2 = min(self._size, int(y) + int(height))
        if x2 <= x1 or y2 <= y1:
            return False

        self._image.paste(to_rgba(color), (x1, y1, x2, y2))
        self._touch()
        return True

    def clear(self, color: Color = None):
        fill = to_rgba(color) if color is not None else self.background
        self._image.paste(fill, (0, 0, self._size, self._size))
        self._touch()

    # ------------------------------------------------------------------
    # Decode / replace
    # ------------------------------------------------------------------

    def _decode(self, data: bytes) -> Image.Image:
        if not data:
            raise TextureDecodeError('empty', "No image data provided")
        try:
            with Image.open(BytesIO(data)) as img:
                img.load()
                decoded = img.convert('RGBA')
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise TextureDecodeError('unreadable', f"Failed to load image: {e}") from e
        return self._fit(decoded)

    def _fit(self, image: Image.Image) -> Image.Image:
        if image.mode != 'RGBA':
            image = image.convert('RGBA')
        if image.size != (self._size, self._size):
            logger.debug(f"Scaling {image.size[0]}x{image.size[1]} image to {self._size}x{self._size}")
            image = image.resize((self._size, self._size), Image.NEAREST)
        return image

    def replace(self, image: Image.Image):
        """Swap in a decoded image, scaling it to the atlas size."""
        self._image = self._fit(image).copy()
        self._touch()

    def load_image(self, data: bytes):
        """
        Replace the raster with an encoded image (PNG, JPEG, ...).

        The image is fully decoded before anything is written, so a failure
        leaves the current contents untouched.

        Raises:
            TextureDecodeError: data is empty or not a readable image
        """
        self.replace(self._decode(data))
        logger.info(f"Loaded {len(data)} byte image into {self._size}x{self._size} atlas")

    async def load_image_async(self, data: bytes):
        """
        Decode on a worker thread, then apply on the calling event loop.

        In-flight decodes are not cancelled; whichever finishes last wins.
        """
        image = await asyncio.to_thread(self._decode, data)
        self.replace(image)
        logger.info(f"Loaded {len(data)} byte image into {self._size}x{self._size} atlas")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def scaled(self, target_size: int) -> Image.Image:
        """Nearest-neighbour copy at ``target_size x target_size``."""
        if target_size == self._size:
            return self._image.copy()
        return self._image.resize((target_size, target_size), Image.NEAREST)

    def export_scaled(self, target_size: int) -> bytes:
        """PNG bytes of a nearest-neighbour scaled copy."""
        buf = BytesIO()
        self.scaled(target_size).save(buf, format='PNG')
        return buf.getvalue()

    def to_array(self) -> np.ndarray:
        return np.array(self._image, dtype=np.uint8)

    def encode(self) -> str:
        """PNG data URL of the current contents (lossless)."""
        buf = BytesIO()
        self._image.save(buf, format='PNG')
        return DATA_URL_PREFIX + base64.b64encode(buf.getvalue()).decode('utf-8')

    @staticmethod
    def decode_data_url(text: str) -> Image.Image:
        """
        Decode a ``data:image/...;base64,`` URL (or bare base64) to an RGBA image.

        Raises:
            TextureDecodeError: malformed URL or unreadable image
        """
        if not text:
            raise TextureDecodeError('empty', "No image data provided")
        payload = text
        if text.startswith('data:'):
            header, sep, payload = text.partition(',')
            if not sep or ';base64' not in header:
                raise TextureDecodeError('bad-data-url', "Image data URL is not base64 encoded")
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise TextureDecodeError('bad-data-url', f"Invalid base64 image data: {e}") from e
        if not raw:
            raise TextureDecodeError('empty', "No image data provided")
        try:
            with Image.open(BytesIO(raw)) as img:
                img.load()
                return img.convert('RGBA')
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise TextureDecodeError('unreadable', f"Failed to load image: {e}") from e
