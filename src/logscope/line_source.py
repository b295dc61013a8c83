"""Lazy line iteration over plain or gzip-compressed log files.

Only single-stream gzip is decompressed. Other compressed containers are
recognized by extension and rejected up front with
UnsupportedCompressionError, so a caller never receives raw compressed bytes
as "lines".
"""

import gzip
import io
import logging
import os
from collections.abc import Iterator


logger = logging.getLogger(__name__)

GZIP_EXTENSIONS = ('.gz', '.gzip')

# Extensions that are recognized as compressed but not decompressed
UNSUPPORTED_COMPRESSIONS = {
    '.bz2': 'bzip2',
    '.xz': 'xz',
    '.lzma': 'lzma',
    '.zst': 'zstd',
    '.zstd': 'zstd',
    '.lz4': 'lz4',
    '.zip': 'zip',
    '.7z': '7z',
    '.rar': 'rar',
    '.tgz': 'tar+gzip',
    '.tar': 'tar',
}


class UnsupportedCompressionError(ValueError):
    """Raised when a file uses a compression this engine does not decompress."""

    def __init__(self, path: str, compression: str):
        self.path = path
        self.compression = compression
        super().__init__(f'Unsupported compression ({compression}) for {os.path.basename(path)}')


def detect_compression(path: str) -> str | None:
    """Detect compression from the file extension.

    Returns:
        'gzip', the name of an unsupported compression, or None for plain files.
    """
    lower = path.lower()
    if lower.endswith('.tar.gz'):
        return 'tar+gzip'
    for ext in GZIP_EXTENSIONS:
        if lower.endswith(ext):
            return 'gzip'
    for ext, name in UNSUPPORTED_COMPRESSIONS.items():
        if lower.endswith(ext):
            return name
    return None


class LineSource:
    """Forward-only iterator of text lines from a file.

    Lines are split on any line ending (``\\n``, ``\\r\\n``, ``\\r``) and
    returned without their terminator. Undecodable bytes are replaced rather
    than raising. A LineSource can be iterated once; reopen the path to start
    over.

    Calling close() while another piece of code is iterating makes the
    iteration stop at the next line boundary.
    """

    def __init__(self, path: str, encoding: str = 'utf-8'):
        self.path = str(path)
        self.compression = detect_compression(self.path)
        if self.compression is not None and self.compression != 'gzip':
            raise UnsupportedCompressionError(self.path, self.compression)
        if not os.path.isfile(self.path):
            raise FileNotFoundError(f'Log file not found: {self.path}')

        self._closed = False
        self._started = False
        self.exhausted = False  # True once end of stream was reached
        self.lines_read = 0
        self._stream = self._open(encoding)

    def _open(self, encoding: str) -> io.TextIOBase:
        if self.compression == 'gzip':
            logger.debug(f'[SOURCE] Opening gzip stream: {self.path}')
            return gzip.open(self.path, 'rt', encoding=encoding, errors='replace', newline=None)
        logger.debug(f'[SOURCE] Opening text stream: {self.path}')
        return open(self.path, 'r', encoding=encoding, errors='replace', newline=None)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[str]:
        if self._started:
            raise RuntimeError('LineSource is single-pass; reopen the file to iterate again')
        self._started = True
        return self._iter_lines()

    def _iter_lines(self) -> Iterator[str]:
        try:
            while not self._closed:
                line = self._stream.readline()
                if not line:
                    self.exhausted = True
                    break
                self.lines_read += 1
                yield line.rstrip('\n')
        finally:
            self.close()

    def close(self) -> None:
        """Release the underlying file; pending iteration stops at the next line."""
        if self._closed:
            return
        self._closed = True
        self._stream.close()

    def __enter__(self) -> 'LineSource':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
