"""
PDF source loading for the Book Search service.

Resolves a book's PDF location to raw bytes. Remote URLs are downloaded
with a bounded timeout; file:// URIs, filesystem paths and server-relative
/files/ locations that exist in the local files directory are read from
disk without a network round trip.
"""

from pathlib import Path
from typing import Union
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import requests

from ..core import get_config, get_logger, ExtractionError
from ..utils import get_file_size_mb

logger = get_logger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


class PDFSourceLoader:
    """
    Loads PDF bytes from a URL or a local path.

    Callers pass a book's stored location as-is; the loader decides
    whether it can be read locally or has to be fetched.
    """

    def __init__(
        self,
        files_directory: Union[str, Path] = None,
        server_url: str = None,
        files_url_prefix: str = None,
        timeout: float = None,
        max_file_size_mb: float = None,
        session=None
    ):
        """
        Initialize the loader.

        Args:
            files_directory: Local directory backing server-relative locations.
            server_url: Base URL used when a server-relative file is not local.
            files_url_prefix: Prefix of server-relative locations (e.g. "/files/").
            timeout: Download timeout in seconds.
            max_file_size_mb: Reject documents larger than this.
            session: Optional requests.Session for downloads.
        """
        config = get_config()

        self.files_directory = Path(files_directory or config.paths.files_directory)
        self.server_url = (server_url or config.extraction.server_url).rstrip("/")
        self.files_url_prefix = files_url_prefix or config.extraction.files_url_prefix
        self.timeout = timeout or config.extraction.download_timeout_seconds
        self.max_file_size_mb = max_file_size_mb or config.extraction.max_file_size_mb
        self.session = session or requests

    def load(self, location: str) -> bytes:
        """
        Read the PDF at the given location.

        Args:
            location: http(s) URL, file:// URI, filesystem path,
                      or server-relative location under files_url_prefix.

        Returns:
            Raw PDF bytes.

        Raises:
            ExtractionError: If the document cannot be read or downloaded.
        """
        if not location or not location.strip():
            raise ExtractionError("PDF location is empty", source=location)

        location = location.strip()
        parsed = urlparse(location)
        scheme = parsed.scheme.lower()

        if scheme in ("http", "https"):
            return self._download(location)

        if scheme == "file":
            return self._read_file(Path(url2pathname(unquote(parsed.path))), location)

        if location.startswith(self.files_url_prefix):
            local_path = self.resolve_local(location)
            if local_path.exists():
                return self._read_file(local_path, location)

            logger.debug(f"Not in local files directory, downloading: {location}")
            return self._download(self.server_url + location)

        return self._read_file(Path(location), location)

    def resolve_local(self, location: str) -> Path:
        """
        Map a server-relative location to a path in the files directory.

        Args:
            location: Location starting with files_url_prefix.

        Returns:
            Path inside files_directory.

        Raises:
            ExtractionError: If the location escapes the files directory.
        """
        name = unquote(location[len(self.files_url_prefix):])
        local_path = (self.files_directory / name).resolve()

        if self.files_directory.resolve() not in local_path.parents:
            raise ExtractionError("PDF location escapes the files directory", source=location)

        return local_path

    def _read_file(self, path: Path, location: str) -> bytes:
        """Read a local PDF file."""
        if not path.is_file():
            raise ExtractionError(f"PDF file not found: {path}", source=location)

        try:
            size_mb = get_file_size_mb(path)
            if size_mb > self.max_file_size_mb:
                raise ExtractionError(
                    f"PDF is too large ({size_mb}MB > {self.max_file_size_mb}MB)",
                    source=location
                )

            data = path.read_bytes()

        except OSError as e:
            raise ExtractionError(f"Failed to read PDF file: {e}", source=location)

        logger.debug(f"Read PDF: {len(data)} bytes from {path}")
        return data

    def _download(self, url: str) -> bytes:
        """Download a PDF, enforcing the timeout and size limit."""
        max_bytes = int(self.max_file_size_mb * 1024 * 1024)

        logger.debug(f"Downloading PDF: {url}")

        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)

            try:
                if response.status_code != 200:
                    raise ExtractionError(
                        f"Request failed with status {response.status_code}",
                        source=url,
                        details={"status_code": response.status_code}
                    )

                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    raise ExtractionError(
                        f"PDF is too large ({declared} bytes)",
                        source=url
                    )

                chunks = []
                received = 0
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    received += len(chunk)
                    if received > max_bytes:
                        raise ExtractionError(
                            f"PDF is too large (more than {max_bytes} bytes)",
                            source=url
                        )
                    chunks.append(chunk)

            finally:
                response.close()

        except requests.RequestException as e:
            raise ExtractionError(f"Request failed: {e}", source=url)

        data = b"".join(chunks)
        logger.debug(f"Downloaded PDF: {len(data)} bytes")
        return data
