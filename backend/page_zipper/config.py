import tempfile
from dataclasses import dataclass, field
from pathlib import Path


def default_workspace_root() -> Path:
    return Path(tempfile.gettempdir()) / 'page_zipper'


@dataclass
class ScraperConfig:
    """Settings that control a single scrape."""

    # None keeps the browser User-Agent the stealth session rotates in,
    # which matches its TLS fingerprint
    user_agent: str | None = None
    page_timeout: float = 15.0
    image_timeout: float = 10.0
    image_concurrency: int = 4
    max_filename_length: int = 100
    workspace_root: Path = field(default_factory=default_workspace_root)
