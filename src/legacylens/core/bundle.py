"""
Source Bundle Builder.

Collects the readable source files of a project (a directory or a .zip
archive) into the single delimited string the analysis service expects:

    --- START FILE: src/App.java ---
    <content>
    --- END FILE ---

Dependency folders, VCS metadata, binaries and oversized files are skipped
using the blocklists in legacylens.config.
"""

import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator, List, Tuple

from ..config import (
    MAX_CONTEXT_BYTES,
    MAX_FILE_SIZE_BYTES,
    is_ignored_directory,
    is_source_file,
)
from .exceptions import BundleError

logger = logging.getLogger(__name__)

FILE_HEADER = "--- START FILE: {path} ---\n"
FILE_FOOTER = "\n--- END FILE ---\n\n"


@dataclass
class SourceBundle:
    context: str = ""
    files: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def size_bytes(self) -> int:
        return len(self.context.encode("utf-8"))

    @property
    def is_empty(self) -> bool:
        return not self.files


def build_context(path: Path) -> SourceBundle:
    """
    Bundle a directory or .zip archive.

    Args:
        path: Project directory or zip file.

    Returns:
        SourceBundle: The context string and which files went in.

    Raises:
        BundleError: If the path is missing or not a readable archive.
    """
    if not path.exists():
        raise BundleError(f"Path not found: {path}")

    if path.is_dir():
        entries = _iter_directory(path)
    elif zipfile.is_zipfile(path):
        entries = _iter_zip(path)
    else:
        raise BundleError(f"Expected a directory or .zip archive: {path}")

    bundle = SourceBundle()
    parts: List[str] = []

    for rel_path, size, read in sorted(entries, key=lambda entry: entry[0]):
        if not _is_candidate(rel_path):
            continue
        if size > MAX_FILE_SIZE_BYTES:
            bundle.skipped.append(rel_path)
            logger.debug(f"Skipping large file: {rel_path} ({size} bytes)")
            continue
        try:
            content = read().decode("utf-8")
        except UnicodeDecodeError:
            bundle.skipped.append(rel_path)
            logger.debug(f"Skipping non-UTF-8 file: {rel_path}")
            continue
        parts.append(FILE_HEADER.format(path=rel_path) + content + FILE_FOOTER)
        bundle.files.append(rel_path)

    bundle.context = "".join(parts)

    if bundle.size_bytes > MAX_CONTEXT_BYTES:
        logger.warning(
            f"Source context is {bundle.size_bytes} bytes; the analysis service "
            f"may reject anything above {MAX_CONTEXT_BYTES} bytes"
        )

    logger.info(f"Bundled {len(bundle.files)} files ({len(bundle.skipped)} skipped)")
    return bundle


def _is_candidate(rel_path: str) -> bool:
    parts = PurePosixPath(rel_path).parts
    if any(is_ignored_directory(part) for part in parts[:-1]):
        return False
    return is_source_file(parts[-1])


def _iter_directory(root: Path) -> List[Tuple[str, int, Callable[[], bytes]]]:
    return [
        (file_path.relative_to(root).as_posix(), file_path.stat().st_size, file_path.read_bytes)
        for file_path in _walk(root)
    ]


def _walk(root: Path) -> Iterator[Path]:
    for child in root.iterdir():
        if child.is_dir():
            if not is_ignored_directory(child.name):
                yield from _walk(child)
        elif child.is_file():
            yield child


def _iter_zip(archive: Path) -> List[Tuple[str, int, Callable[[], bytes]]]:
    # Members are read up front; the archive is closed before bundling
    entries = []
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                data = b""
                if info.file_size <= MAX_FILE_SIZE_BYTES and _is_candidate(info.filename):
                    data = zf.read(info)
                entries.append((info.filename, info.file_size, _reader(data)))
    except zipfile.BadZipFile as e:
        raise BundleError(f"Failed to load ZIP file. It might be corrupted: {archive}") from e
    return entries


def _reader(data: bytes) -> Callable[[], bytes]:
    return lambda: data
