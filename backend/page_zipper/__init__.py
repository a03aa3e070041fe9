from .config import ScraperConfig
from .errors import ArchiveBuildError, InvalidURLError, PageFetchError, ScrapeError
from .models import ArchiveArtifact, DownloadedImage, FetchedPage, ImageReference, RequestContext
from .page_scraper import PageScraper, find_image_sources
from .utils import new_request_id, resolve_url, sanitize_filename, validate_target_url
from .workspace import request_workspace
