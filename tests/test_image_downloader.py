"""
Tests for saving generated images
"""

import asyncio
import base64
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ai.exceptions.pixelmind_exceptions import DownloadError
from media.image_downloader import ImageDownloader, decode_data_uri

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


class TestDecodeDataUri(unittest.TestCase):
    """data: URI decoding"""

    def test_base64(self):
        uri = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()
        self.assertEqual(decode_data_uri(uri), PNG_BYTES)

    def test_percent_encoded(self):
        self.assertEqual(decode_data_uri("data:image/svg+xml,%3Csvg%2F%3E"), b"<svg/>")

    def test_bad_base64(self):
        with self.assertRaises(DownloadError):
            decode_data_uri("data:image/png;base64,***")

    def test_missing_comma(self):
        with self.assertRaises(DownloadError):
            decode_data_uri("data:image/png;base64")


class TestImageDownloader(unittest.TestCase):
    """ImageDownloader.download"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.client = AsyncMock()
        self.client.fetch_image.return_value = PNG_BYTES
        self.downloader = ImageDownloader(self.client, download_dir=self.tmp.name, filename="out.png")

    def test_url_is_fetched(self):
        path = asyncio.run(self.downloader.download("https://img/result.png"))
        self.assertEqual(path, Path(self.tmp.name) / "out.png")
        self.assertEqual(path.read_bytes(), PNG_BYTES)
        self.client.fetch_image.assert_awaited_once_with("https://img/result.png")

    def test_data_uri_is_decoded_locally(self):
        uri = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()
        path = asyncio.run(self.downloader.download(uri))
        self.assertEqual(path.read_bytes(), PNG_BYTES)
        self.client.fetch_image.assert_not_awaited()

    def test_explicit_destination_creates_parents(self):
        target = Path(self.tmp.name) / "nested" / "dir" / "cat.png"
        path = asyncio.run(self.downloader.download("https://img/result.png", target))
        self.assertEqual(path, target)
        self.assertTrue(target.exists())

    def test_unwritable_destination(self):
        blocker = Path(self.tmp.name) / "file"
        blocker.write_text("not a directory")
        with self.assertRaises(DownloadError):
            asyncio.run(self.downloader.download("https://img/result.png", blocker / "out.png"))


if __name__ == '__main__':
    unittest.main()
