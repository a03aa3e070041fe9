import zipfile
from collections.abc import Sequence
from pathlib import Path

from .errors import ArchiveBuildError
from .images import unique_filenames
from .models import DownloadedImage


TEXT_ENTRY = 'text.txt'
IMAGES_DIR = 'images'


def build_archive(destination: Path, page_content: bytes, images: Sequence[DownloadedImage]) -> Path:
    """
    Write the page HTML and downloaded images into a zip file.

    Args:
        destination: Path of the zip file to create
        page_content: Raw page body, stored verbatim as text.txt
        images: Downloaded images in scan order

    Returns:
        The destination path.

    Images go under images/; the directory entry is only written when there
    is at least one image. Compression is deflate at the highest level.
    """
    try:
        with zipfile.ZipFile(
            destination, 'w', compression=zipfile.ZIP_DEFLATED, compresslevel=9
        ) as zf:
            zf.writestr(TEXT_ENTRY, page_content)
            if images:
                zf.mkdir(IMAGES_DIR)
                for name, image in unique_filenames(images):
                    zf.writestr(f'{IMAGES_DIR}/{name}', image.content)
    except (OSError, zipfile.BadZipFile, ValueError) as exc:
        raise ArchiveBuildError(f'Failed to build archive: {exc}') from exc
    return destination
