import logging
from dataclasses import dataclass, field


logger = logging.getLogger('page_zipper')


class RequestLogAdapter(logging.LoggerAdapter):
    """Prefix every log line with the request id."""

    def process(self, msg, kwargs):
        return f'[{self.extra["request_id"]}] {msg}', kwargs


@dataclass
class RequestContext:
    """Per-request state threaded through every pipeline call."""

    request_id: str
    log: logging.LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self):
        self.log = RequestLogAdapter(logger, {'request_id': self.request_id})


@dataclass(frozen=True)
class FetchedPage:
    url: str
    base_url: str  # final URL after redirects
    html: str
    content: bytes  # raw body, stored verbatim in the archive


@dataclass(frozen=True)
class ImageReference:
    raw_src: str
    resolved_url: str | None


@dataclass(frozen=True)
class DownloadedImage:
    filename: str
    content: bytes
    content_type: str
    source_url: str


@dataclass(frozen=True)
class ArchiveArtifact:
    content: bytes
    filename: str
    image_count: int
