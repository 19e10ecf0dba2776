"""
Zip archive unpacking for batch results.

The service answers batch renders and split-zip requests with a zip
archive. Only unpacking is needed; the client never uploads archives.

Extraction to disk is not transactional: entries written before a failure
stay on disk.
"""

import io
import logging
import zipfile
import zlib
from pathlib import Path
from typing import List, Union

from .errors import PDFDecodeError

logger = logging.getLogger(__name__)

# Raised by zipfile for corrupt, truncated or unsupported entry data
ENTRY_READ_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
)


def _open_archive(zip_bytes: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(zip_bytes))
    except zipfile.BadZipFile as e:
        raise PDFDecodeError(f"Invalid zip archive: {e}") from e


def extract(zip_bytes: bytes) -> List[bytes]:
    """
    Read every file of a zip archive into memory.

    Entry names are dropped; results keep archive order. Directory entries
    are skipped.

    Args:
        zip_bytes: Zip archive content

    Returns:
        One bytes object per file entry

    Raises:
        PDFDecodeError: If the archive is malformed
    """
    files = []
    with _open_archive(zip_bytes) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            try:
                files.append(archive.read(info))
            except ENTRY_READ_ERRORS as e:
                raise PDFDecodeError(f"Cannot read zip entry {info.filename}: {e}") from e
    logger.debug(f"Extracted {len(files)} files from zip archive")
    return files


def extract_to_directory(zip_bytes: bytes, output_dir: Union[str, Path]) -> List[Path]:
    """
    Write the files of a zip archive under a directory.

    Each entry keeps its relative path; intermediate directories are
    created and existing files are overwritten.

    Args:
        zip_bytes: Zip archive content
        output_dir: Destination directory

    Returns:
        Paths of the written files, in archive order

    Raises:
        PDFDecodeError: If the archive is malformed or an entry would land
            outside output_dir
    """
    root = Path(output_dir).resolve()
    written = []
    with _open_archive(zip_bytes) as archive:
        for info in archive.infolist():
            target = (root / info.filename).resolve()
            try:
                target.relative_to(root)
            except ValueError as e:
                raise PDFDecodeError(f"Zip entry escapes output directory: {info.filename}") from e

            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                content = archive.read(info)
            except ENTRY_READ_ERRORS as e:
                raise PDFDecodeError(f"Cannot read zip entry {info.filename}: {e}") from e
            target.write_bytes(content)
            written.append(target)

    logger.info(f"Extracted {len(written)} files to {root}")
    return written


def save(content: bytes, file_path: Union[str, Path, None]) -> None:
    """
    Write bytes to a file.

    Does nothing when file_path is empty.
    """
    if not file_path:
        return
    Path(file_path).write_bytes(content)
    logger.debug(f"Saved {len(content)} bytes to {file_path}")
