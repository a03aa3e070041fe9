import re
import time
import uuid
import urllib.parse

from .errors import InvalidURLError


UNSAFE_CHARS_RE = re.compile(r'[^A-Za-z0-9_.-]')
UNDERSCORE_RUN_RE = re.compile(r'_{2,}')

MAX_FILENAME_LENGTH = 100
HTTP_SCHEMES = {'http', 'https'}


def _random_suffix() -> str:
    return uuid.uuid4().hex[:8]


def new_request_id() -> str:
    """Unique per-request id: `<millisecond epoch>_<8 hex chars>`."""
    return f'{int(time.time() * 1000)}_{_random_suffix()}'


def sanitize_filename(filename: str | None, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """
    Make a name safe to use as a zip entry or file on disk.

    Every character outside [A-Za-z0-9_.-] becomes '_', runs of '_' are
    collapsed, leading/trailing '_' are stripped and the result is cut to
    `max_length` characters. Empty input (or input that sanitizes to nothing)
    gets a synthesized `file_<hex>` name.

    Examples:
        sanitize_filename("my photo (1).png") -> "my_photo_1_.png"
        sanitize_filename("__a??b__") -> "a_b"
    """
    if not filename:
        return f'file_{_random_suffix()}'

    name = UNSAFE_CHARS_RE.sub('_', filename)
    name = UNDERSCORE_RUN_RE.sub('_', name).strip('_')
    name = name[:max_length].rstrip('_')
    return name or f'file_{_random_suffix()}'


def resolve_url(base: str, src: str | None) -> str | None:
    """
    Resolve a possibly relative reference against the base URL.

    Args:
        base: The final page URL (after redirects)
        src: Raw attribute value from the markup

    Returns:
        The absolute http(s) URL with the fragment removed, or None if the
        reference is empty, malformed or does not resolve to an http(s) URL.
    """
    if not src or not src.strip():
        return None
    try:
        u = urllib.parse.urljoin(base, src.strip())
        u, _ = urllib.parse.urldefrag(u)
        p = urllib.parse.urlsplit(u)
        # .hostname raises on malformed netlocs like "[::1"
        host = p.hostname
    except ValueError:
        return None
    if p.scheme.lower() not in HTTP_SCHEMES or not host:
        return None
    return u


def validate_target_url(url: str | None) -> str:
    """Return the stripped target URL or raise InvalidURLError."""
    if not url or not url.strip():
        raise InvalidURLError('URL is required')
    url = url.strip()
    try:
        p = urllib.parse.urlsplit(url)
        host = p.hostname
    except ValueError:
        raise InvalidURLError('URL must be absolute') from None
    if p.scheme.lower() not in HTTP_SCHEMES or not host:
        raise InvalidURLError('URL must be absolute')
    return url
