"""Tests for image filename derivation and collision handling."""

import re

import pytest

from page_zipper.images import (
    extension_from_content_type,
    image_filename,
    is_image_content_type,
    unique_filenames,
)
from page_zipper.models import DownloadedImage


@pytest.mark.parametrize(
    'content_type, expected',
    [
        ('image/png', True),
        ('IMAGE/GIF', True),
        ('image/svg+xml; charset=utf-8', True),
        ('text/html', False),
        ('application/octet-stream', False),
        ('', False),
        (None, False),
    ],
)
def test_is_image_content_type(content_type, expected):
    assert is_image_content_type(content_type) is expected


@pytest.mark.parametrize(
    'content_type, expected',
    [
        ('image/png', 'png'),
        ('image/jpeg', 'jpg'),
        ('image/webp; q=0.9', 'webp'),
        ('image/svg+xml', 'svg'),
        ('image/', 'jpg'),
        ('image/x.weird', 'jpg'),
        (None, 'jpg'),
    ],
)
def test_extension_from_content_type(content_type, expected):
    assert extension_from_content_type(content_type) == expected


class TestImageFilename:
    def test_uses_last_path_segment(self):
        assert image_filename('https://example.test/img/logo.png', 1, 'image/png') == 'logo.png'

    def test_query_string_is_ignored(self):
        assert image_filename('https://example.test/a/pic.gif?size=large', 3, 'image/gif') == 'pic.gif'

    def test_existing_extension_is_kept_even_if_content_type_differs(self):
        assert image_filename('https://example.test/photo.jpeg', 1, 'image/webp') == 'photo.jpeg'

    def test_missing_extension_comes_from_content_type(self):
        assert image_filename('https://example.test/avatar', 1, 'image/png') == 'avatar.png'

    def test_unmappable_content_type_defaults_to_jpg(self):
        assert image_filename('https://example.test/avatar', 1, 'image/') == 'avatar.jpg'

    @pytest.mark.parametrize('url', ['https://example.test/', 'https://example.test', 'https://example.test/dir/'])
    def test_empty_segment_uses_ordinal(self, url):
        assert image_filename(url, 4, 'image/gif') == 'image_4.gif'

    def test_result_is_sanitized(self):
        name = image_filename('https://example.test/my%20cat%20(1).png', 1, 'image/png')
        assert name == 'my_20cat_20_1_.png'
        assert re.fullmatch(r'[A-Za-z0-9_.-]+', name)


def _image(filename: str) -> DownloadedImage:
    return DownloadedImage(filename=filename, content=filename.encode(), content_type='image/png', source_url='')


def test_unique_filenames_appends_ordinal_suffix():
    images = [_image('photo.jpg'), _image('photo.jpg'), _image('logo.png'), _image('photo.jpg')]
    names = [name for name, _ in unique_filenames(images)]
    assert names == ['photo.jpg', 'photo_2.jpg', 'logo.png', 'photo_3.jpg']


def test_unique_filenames_skips_names_already_taken():
    images = [_image('photo_2.jpg'), _image('photo.jpg'), _image('photo.jpg')]
    names = [name for name, _ in unique_filenames(images)]
    assert names == ['photo_2.jpg', 'photo.jpg', 'photo_3.jpg']


def test_unique_filenames_without_extension():
    names = [name for name, _ in unique_filenames([_image('README'), _image('README')])]
    assert names == ['README', 'README_2']


def test_dot_file_segment_keeps_its_extension():
    assert image_filename('http://x.test/.png', 1, 'image/gif') == '.png'


def test_trailing_dot_gets_content_type_extension():
    assert image_filename('http://x.test/photo.', 1, 'image/webp') == 'photo.webp'
