"""
Image resolution for catalog generation.

Fetches product photos (through the image proxy when one is configured)
and decodes them with Pillow. A product photo that cannot be obtained is
replaced by a built-in placeholder so that generation always continues.
"""

import base64
import binascii
import io
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import requests
from loguru import logger
from PIL import Image, ImageDraw, UnidentifiedImageError

from .config import AppConfig, get_config
from .errors import ImageFetchError

PLACEHOLDER_SIZE = (400, 300)


@dataclass
class ImagePayload:
    """A decoded image ready to be embedded in the PDF"""
    image: Image.Image
    format: str
    is_placeholder: bool = False

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@lru_cache(maxsize=1)
def _placeholder_image() -> Image.Image:
    width, height = PLACEHOLDER_SIZE
    image = Image.new('RGB', PLACEHOLDER_SIZE, (243, 244, 244))
    draw = ImageDraw.Draw(image)

    # Simple "picture" glyph: frame, sun and mountain
    draw.rectangle((width * 0.3, height * 0.25, width * 0.7, height * 0.75), outline=(200, 202, 205), width=6)
    draw.ellipse((width * 0.38, height * 0.33, width * 0.46, height * 0.44), fill=(200, 202, 205))
    draw.polygon(
        [(width * 0.33, height * 0.72), (width * 0.48, height * 0.5), (width * 0.58, height * 0.62),
         (width * 0.62, height * 0.56), (width * 0.67, height * 0.72)],
        fill=(200, 202, 205)
    )
    return image


def placeholder_image() -> ImagePayload:
    return ImagePayload(image=_placeholder_image(), format='PNG', is_placeholder=True)


def decode_image_data(data: str) -> ImagePayload:
    """Decode a data URL (or bare base64 string) into an image payload"""
    if not data:
        raise ImageFetchError("Empty image data")

    encoded = data
    if data.startswith('data:'):
        header, _, encoded = data.partition(',')
        if ';base64' not in header:
            raise ImageFetchError("Image data URL is not base64 encoded", details={'header': header})

    try:
        raw = base64.b64decode(''.join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageFetchError(f"Invalid base64 image data: {e}") from e

    return decode_image_bytes(raw)


def decode_image_bytes(raw: bytes) -> ImagePayload:
    # Pillow reports oversized and corrupt images with non-OSError types
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()

        image_format = image.format or 'PNG'
        if image.mode not in ('RGB', 'RGBA'):
            has_alpha = image.mode in ('LA', 'PA') or 'transparency' in image.info
            image = image.convert('RGBA' if has_alpha else 'RGB')
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
        raise ImageFetchError(f"Cannot decode image: {e}") from e

    if image.width <= 0 or image.height <= 0:
        raise ImageFetchError("Image has no pixels")

    return ImagePayload(image=image, format=image_format)


class ImageResolver:
    """Resolves remote image URLs into embeddable payloads, one at a time"""

    def __init__(self, config: Optional[AppConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or get_config()
        self.session = session or requests.Session()
        self.failures = 0

    @property
    def uses_proxy(self) -> bool:
        return bool(self.config.IMAGE_PROXY_URL)

    def resolve(self, url: Optional[str]) -> ImagePayload:
        """Return the image at ``url``, or the placeholder on any failure. Never raises."""
        payload = self.fetch(url)
        return payload if payload is not None else placeholder_image()

    def fetch(self, url: Optional[str]) -> Optional[ImagePayload]:
        """Return the image at ``url``, or None when it cannot be obtained"""
        if not url:
            return None

        try:
            if self.uses_proxy:
                payload = self._fetch_via_proxy(url)
            else:
                payload = self._fetch_direct(url)
        except (ImageFetchError, requests.RequestException) as e:
            self.failures += 1
            logger.warning(f"Image not loaded ({url}): {e}")
            return None

        logger.debug(f"Loaded image {url} ({payload.width}x{payload.height} {payload.format})")
        return payload

    def _fetch_via_proxy(self, url: str) -> ImagePayload:
        headers = {'Content-Type': 'application/json'}
        if self.config.IMAGE_PROXY_KEY:
            headers['Authorization'] = f"Bearer {self.config.IMAGE_PROXY_KEY}"

        response = self.session.post(
            self.config.IMAGE_PROXY_URL,
            json={'imageUrl': url},
            headers=headers,
            timeout=self.config.IMAGE_FETCH_TIMEOUT
        )
        if not response.ok:
            raise ImageFetchError(f"Image proxy returned HTTP {response.status_code}",
                                  details={'status_code': response.status_code})

        try:
            body = response.json()
        except ValueError as e:
            raise ImageFetchError("Image proxy returned a non-JSON body") from e

        data = body.get('data') if isinstance(body, dict) else None
        if not data or not isinstance(data, str):
            raise ImageFetchError("Image proxy returned no data")

        return decode_image_data(data)

    def _fetch_direct(self, url: str) -> ImagePayload:
        if url.startswith('data:'):
            return decode_image_data(url)

        response = self.session.get(url, timeout=self.config.IMAGE_FETCH_TIMEOUT)
        if not response.ok:
            raise ImageFetchError(f"Image host returned HTTP {response.status_code}",
                                  details={'status_code': response.status_code})
        return decode_image_bytes(response.content)
