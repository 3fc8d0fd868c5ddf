"""
Content image helpers.

Images referenced by content.json live in the package content files
(content/images/...). add_content_image() stores the bytes there and
returns the BackgroundImage reference, with MIME type and size read by
Pillow rather than guessed from the file name.
"""

from __future__ import annotations

import hashlib
import logging
from io import BytesIO
from pathlib import Path, PurePosixPath
from typing import NamedTuple, Optional, Union

from PIL import Image, UnidentifiedImageError

from h5p_toolkit.core.models.package import Package
from h5p_toolkit.core.utils.paths import normalize_relative_path
from h5p_toolkit.errors import BuilderError

from .question_set import BackgroundImage, Copyright

logger = logging.getLogger(__name__)

IMAGE_DIR = "images"


class ImageInfo(NamedTuple):
    mime: str
    extension: str
    width: int
    height: int


def detect_image(data: bytes) -> ImageInfo:
    """
    Identify image bytes with Pillow.

    Raises:
        BuilderError: If Pillow does not recognise the data as an image
    """
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise BuilderError(f"Not a recognised image: {e}") from e

    mime = Image.MIME.get(fmt or "")
    if not mime:
        raise BuilderError(f"No MIME type known for image format {fmt!r}")
    extension = (fmt or "").lower()
    if extension == "jpeg":
        extension = "jpg"
    return ImageInfo(mime=mime, extension=extension, width=width, height=height)


def add_content_image(
    package: Package,
    source: Union[str, Path, bytes],
    path: Optional[str] = None,
    copyright: Optional[Copyright] = None,
) -> BackgroundImage:
    """
    Store an image in the package content files.

    Args:
        package: Package receiving the file
        source: Image file path or raw bytes
        path: Location below content/; defaults to images/<file name>, or
            images/<hash>.<ext> for raw bytes
        copyright: Optional copyright record for the reference

    Returns:
        BackgroundImage pointing at the stored file

    Raises:
        BuilderError: If the data is not a recognised image
        UnsafePathError: If path escapes content/
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        default_name = None
    else:
        data = Path(source).read_bytes()
        default_name = Path(source).name

    info = detect_image(data)
    if path is None:
        name = default_name or f"{hashlib.sha1(data).hexdigest()[:12]}.{info.extension}"
        path = str(PurePosixPath(IMAGE_DIR) / name)
    path = normalize_relative_path(path)

    package.add_content_file(path, data)
    logger.debug(f"Added {info.mime} image {path} ({info.width}x{info.height})")
    return BackgroundImage(
        path=path,
        mime=info.mime,
        copyright=copyright,
        width=info.width,
        height=info.height,
    )
