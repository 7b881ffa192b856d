import os
import logging
from pathlib import Path
from typing import Tuple
from urllib.parse import urlparse

import requests

from errors import DocumentReadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

CONTENT_TYPES = {
    'text/csv': '.csv',
    'application/pdf': '.pdf',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet': '.xlsx',
}


class FileLoader:
    """Fetches statement bytes from a local path or an http(s) URL."""

    SUPPORTED_EXTENSIONS = {'.csv', '.xlsx', '.xlsm', '.pdf'}

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.timeout = timeout

    @staticmethod
    def is_url(source: str) -> bool:
        return source.startswith('http://') or source.startswith('https://')

    def load_bytes(self, source: str) -> Tuple[str, bytes]:
        """
        Load a statement and report its extension.

        Args:
            source: Local file path or http(s) URL

        Returns:
            Tuple of (extension, content) where extension is e.g. '.csv'
        """
        if self.is_url(source):
            return self._download(source)

        if not os.path.exists(source):
            raise FileNotFoundError(f"File not found: {source}")

        file_ext = Path(source).suffix.lower()
        self._check_extension(file_ext, source)
        self.logger.info(f"Loading {file_ext} file: {source}")
        return file_ext, Path(source).read_bytes()

    def _download(self, url: str) -> Tuple[str, bytes]:
        self.logger.info(f"Downloading statement from {url}")
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DocumentReadError(f"failed to download file: {e}") from e

        file_ext = Path(urlparse(url).path).suffix.lower()
        if file_ext not in self.SUPPORTED_EXTENSIONS:
            content_type = response.headers.get('Content-Type', '').split(';')[0].strip().lower()
            file_ext = CONTENT_TYPES.get(content_type, file_ext)
        self._check_extension(file_ext, url)
        return file_ext, response.content

    def _check_extension(self, file_ext: str, source: str):
        if file_ext not in self.SUPPORTED_EXTENSIONS:
            raise ValueError(f"Unsupported file type: {file_ext or 'unknown'} ({source})")
