"""Content-type checks and filename derivation for downloaded images."""

import re
import urllib.parse
from collections.abc import Iterable

from .models import DownloadedImage
from .utils import sanitize_filename, MAX_FILENAME_LENGTH


DEFAULT_IMAGE_EXTENSION = 'jpg'
EXTENSION_RE = re.compile(r'^[A-Za-z0-9]+$')


def is_image_content_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.strip().lower().startswith('image/')


def extension_from_content_type(content_type: str | None) -> str:
    """
    Guess a file extension from the subtype of an image content-type.

    Examples:
        "image/png" -> "png"
        "image/jpeg; charset=binary" -> "jpg"
        "image/svg+xml" -> "svg"
        "image/" -> "jpg"
    """
    if not content_type or '/' not in content_type:
        return DEFAULT_IMAGE_EXTENSION
    subtype = content_type.split(';')[0].split('/', 1)[1].strip().lower()
    subtype = subtype.split('+')[0]
    if subtype == 'jpeg':
        subtype = 'jpg'
    if not EXTENSION_RE.match(subtype):
        return DEFAULT_IMAGE_EXTENSION
    return subtype


def image_filename(
    url: str,
    ordinal: int,
    content_type: str | None,
    max_length: int = MAX_FILENAME_LENGTH,
) -> str:
    """
    Build the archive filename for an image.

    Args:
        url: Absolute image URL
        ordinal: 1-based position of the image in scan order
        content_type: Response content-type, used when the name has no extension
        max_length: Passed through to the sanitizer

    Uses the last path segment of the URL, falling back to `image_<ordinal>`,
    and appends an extension derived from the content-type when missing.
    """
    path = urllib.parse.urlsplit(url).path
    name = path.rsplit('/', 1)[-1]
    if not name:
        name = f'image_{ordinal}'

    _, dot, ext = name.rpartition('.')
    if not dot or not ext:
        name = f'{name.rstrip(".")}.{extension_from_content_type(content_type)}'

    return sanitize_filename(name, max_length=max_length)


def _with_suffix(filename: str, n: int) -> str:
    stem, dot, ext = filename.rpartition('.')
    if not dot or not stem:
        return f'{filename}_{n}'
    return f'{stem}_{n}.{ext}'


def unique_filenames(images: Iterable[DownloadedImage]) -> list[tuple[str, DownloadedImage]]:
    """
    Pair every image with a name that is unique within the archive.

    The first image keeps its name; later collisions get `_2`, `_3`, ...
    inserted before the extension. Order is preserved.
    """
    taken: set[str] = set()
    named = []
    for image in images:
        name = image.filename
        n = 1
        while name in taken:
            n += 1
            name = _with_suffix(image.filename, n)
        taken.add(name)
        named.append((name, image))
    return named
