import asyncio
from pathlib import Path

from lxml import etree
from lxml import html as lxml_html
from stealth_requests import AsyncStealthSession

from .archive import build_archive
from .config import ScraperConfig
from .errors import PageFetchError
from .images import image_filename, is_image_content_type
from .models import ArchiveArtifact, DownloadedImage, FetchedPage, ImageReference, RequestContext
from .utils import resolve_url


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _write_archive(destination: Path, page_content: bytes, images: list[DownloadedImage]) -> bytes:
    return build_archive(destination, page_content, images).read_bytes()


def find_image_sources(text: str) -> list[str]:
    """
    Return the src of every <img> in document order.

    Malformed markup is parsed best-effort by lxml. Empty or unparseable
    documents yield an empty list.
    """
    if not text or not text.strip():
        return []
    try:
        doc = lxml_html.fromstring(text)
    except (etree.ParserError, ValueError):
        # lxml refuses str input that carries an XML encoding declaration
        try:
            doc = lxml_html.fromstring(text.encode('utf-8'))
        except (etree.ParserError, ValueError):
            return []

    return [src for src in doc.xpath('//img/@src') if src.strip()]


class PageScraper:
    def __init__(
        self,
        session: AsyncStealthSession,
        url: str,
        context: RequestContext,
        config: ScraperConfig | None = None,
    ):
        """
        Args:
            session: Stealth HTTP session used for the page and its images
            url: Validated absolute URL of the page to scrape
            context: Per-request id and logger
            config: Timeouts, user agent and concurrency settings
        """
        self.session = session
        self.url = url
        self.context = context
        self.config = config or ScraperConfig()
        self.log = context.log

    @property
    def headers(self) -> dict[str, str]:
        if not self.config.user_agent:
            return {}
        return {'User-Agent': self.config.user_agent}

    async def run(self, workspace: Path) -> ArchiveArtifact:
        """
        Fetch the page, download its images and zip everything up.

        Args:
            workspace: Scoped directory for this request; the zip is written here

        Raises PageFetchError or ArchiveBuildError. Per-image problems are
        logged and skipped.
        """
        self.log.info('Processing URL: %s', self.url)

        page = await self.fetch_page()
        references = self.scan_images(page)
        urls = [ref.resolved_url for ref in references if ref.resolved_url]
        self.log.info('Found %d potential image URLs.', len(urls))

        images = await self.download_images(urls)
        self.log.info('Downloaded %d images successfully.', len(images))

        filename = f'website_data_{self.context.request_id}.zip'
        self.log.info('Creating ZIP file...')
        # deflate at level 9 is CPU bound; keep it off the event loop
        content = await asyncio.to_thread(_write_archive, workspace / filename, page.content, images)
        self.log.info('ZIP file ready (%d bytes)', len(content))

        return ArchiveArtifact(content=content, filename=filename, image_count=len(images))

    async def fetch_page(self) -> FetchedPage:
        """
        GET the target page, following redirects.

        The final URL becomes the base for resolving image references.
        """
        self.log.info('Fetching HTML...')
        try:
            resp = await self.session.get(
                self.url,
                headers=self.headers,
                timeout=self.config.page_timeout,
                allow_redirects=True,
            )
        except Exception as exc:
            raise PageFetchError(str(exc) or type(exc).__name__) from exc

        if not is_success(resp.status_code):
            raise PageFetchError(f'Failed to fetch HTML: {resp.status_code}')

        base_url = str(resp.url or self.url)
        self.log.info('HTML fetched. Base URL: %s', base_url)
        return FetchedPage(url=self.url, base_url=base_url, html=resp.text or '', content=resp.content or b'')

    def scan_images(self, page: FetchedPage) -> list[ImageReference]:
        references = []
        for src in find_image_sources(page.html):
            resolved = resolve_url(page.base_url, src)
            if resolved is None:
                self.log.warning('Skipping invalid image src: %s', src)
            references.append(ImageReference(raw_src=src, resolved_url=resolved))
        return references

    async def download_images(self, urls: list[str]) -> list[DownloadedImage]:
        """
        Download images with bounded concurrency, keeping scan order.

        Each image is isolated: a failure only drops that image.
        """
        semaphore = asyncio.Semaphore(max(1, self.config.image_concurrency))
        total = len(urls)

        async def bounded(ordinal: int, url: str) -> DownloadedImage | None:
            async with semaphore:
                self.log.info('Downloading image %d/%d: %s', ordinal, total, url)
                return await self.fetch_image(url, ordinal)

        results = await asyncio.gather(
            *(bounded(ordinal, url) for ordinal, url in enumerate(urls, start=1))
        )
        return [image for image in results if image is not None]

    async def fetch_image(self, url: str, ordinal: int) -> DownloadedImage | None:
        """
        Download a single image.

        Args:
            url: Absolute image URL
            ordinal: 1-based position in scan order, used for unnamed images

        Returns:
            The downloaded image, or None if it was skipped.
        """
        try:
            resp = await self.session.get(
                url,
                headers=self.headers,
                timeout=self.config.image_timeout,
                allow_redirects=True,
            )
        except Exception as exc:
            self.log.error('Failed to download image %s: %s', url, str(exc) or type(exc).__name__)
            return None

        if not is_success(resp.status_code):
            self.log.warning('Skipping image with status %s: %s', resp.status_code, url)
            return None

        content_type = resp.headers.get('content-type')
        if not is_image_content_type(content_type):
            self.log.warning('Skipping non-image content type (%s): %s', content_type, url)
            return None

        filename = image_filename(url, ordinal, content_type, self.config.max_filename_length)
        self.log.info('Saved image: %s', filename)
        return DownloadedImage(
            filename=filename,
            content=resp.content or b'',
            content_type=content_type,
            source_url=url,
        )
