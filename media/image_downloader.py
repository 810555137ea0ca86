"""Saves a generated image to disk"""
import base64
import binascii
import urllib.parse
from pathlib import Path
from typing import Optional, Union

from ai.exceptions.pixelmind_exceptions import DownloadError
from config import PIXELMIND_DOWNLOAD_DIR, PIXELMIND_DOWNLOAD_FILENAME
from utils.logging_config import get_logger

logger = get_logger(__name__)


def decode_data_uri(image_ref: str) -> bytes:
    """Decode a data: URI (base64 or percent-encoded) into bytes"""
    header, sep, payload = image_ref.partition(",")
    if not sep:
        raise DownloadError("Malformed data URI: missing ','")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DownloadError(f"Malformed base64 data URI: {e}") from e
    return urllib.parse.unquote_to_bytes(payload)


class ImageDownloader:
    """
    Writes the image behind an image reference to a file.

    Image references are opaque strings usable as a display source: an
    absolute URL, a path relative to the API, or an embedded data: URI.
    """

    def __init__(self, client, download_dir: Union[str, Path] = PIXELMIND_DOWNLOAD_DIR,
                 filename: str = PIXELMIND_DOWNLOAD_FILENAME):
        self.client = client
        self.download_dir = Path(download_dir)
        self.filename = filename

    async def download(self, image_ref: str, destination: Optional[Union[str, Path]] = None) -> Path:
        """
        Save the image and return the path written.

        Args:
            image_ref: Image reference returned by the generation endpoint
            destination: Target file; defaults to download_dir/filename

        Raises:
            DownloadError: the image could not be fetched, decoded or written
        """
        target = Path(destination) if destination else self.download_dir / self.filename

        if image_ref.startswith("data:"):
            content = decode_data_uri(image_ref)
        else:
            content = await self.client.fetch_image(image_ref)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            raise DownloadError(f"Could not write {target}: {e}") from e

        logger.info(f"💾 Saved image ({len(content)} bytes) to {target}")
        return target
