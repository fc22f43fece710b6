"""I/O utilities for transparent gzip handling of VCF files.

Call sets arrive as plain or gzip/bgzip-compressed VCF. Compression is
detected from magic bytes when reading and from the path suffix when writing.

Example:
    with smart_open(Path("calls.vcf.gz")) as f:
        for line in f:
            process(line)
"""

import gzip
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from callset_concordance.utils import is_compressed

# Gzip magic bytes (first two bytes of gzip and bgzip files)
GZIP_MAGIC = b"\x1f\x8b"


def is_gzipped(filepath: Path) -> bool:
    """Detect if a file is gzip-compressed.

    Checks magic bytes first, falls back to the extension if the file
    is too small or unreadable.

    Args:
        filepath: Path to file to check

    Returns:
        True if file is gzip-compressed
    """
    try:
        with open(filepath, "rb") as f:
            magic = f.read(2)
            if len(magic) >= 2:
                return magic == GZIP_MAGIC
    except OSError:
        pass

    return is_compressed(filepath)


@contextmanager
def smart_open(filepath: Path) -> Iterator[IO[str]]:
    """Open a file for text reading with automatic gzip detection.

    Args:
        filepath: Path to file (may be .gz or uncompressed)

    Yields:
        Text file handle
    """
    if is_gzipped(filepath):
        f = gzip.open(filepath, "rt", encoding="utf-8")
    else:
        f = open(filepath, "rt", encoding="utf-8")

    try:
        yield f
    finally:
        f.close()


def open_output(filepath: Path) -> IO[str]:
    """Open an output file for text writing, gzip-compressed for .gz paths.

    The caller owns the handle and must close it.
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)
    if is_compressed(filepath):
        return gzip.open(filepath, "wt", encoding="utf-8")
    return open(filepath, "w", encoding="utf-8")


def iter_lines(filepath: Path) -> Iterator[str]:
    """Iterate over lines of a file with gzip auto-detection.

    Lines are stripped of trailing newlines (and carriage returns).
    """
    with smart_open(filepath) as f:
        for line in f:
            yield line.rstrip("\r\n")


@contextmanager
def atomic_output(filepath: Path) -> Iterator[IO[str]]:
    """Write an output file through a temporary sibling, renamed on success.

    An interrupted write leaves no file at ``filepath``, so a partial output
    is never mistaken for a finished one on the next run.

    Args:
        filepath: Final output path (gzip-compressed for .gz paths)

    Yields:
        Text file handle for the temporary file
    """
    tmp_path = filepath.with_name(f".tmp.{filepath.name}")
    f = open_output(tmp_path)
    try:
        yield f
    except BaseException:
        f.close()
        tmp_path.unlink(missing_ok=True)
        raise
    f.close()
    tmp_path.replace(filepath)
