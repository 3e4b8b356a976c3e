"""Pre-flight checks and image enumeration for source directories."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .errors import DirectoryNotFoundError, TooFewImagesError

SUPPORTED_EXTENSIONS = frozenset(
    {".bmp", ".gif", ".jpg", ".jpeg", ".png", ".tif", ".tiff"}
)

MIN_IMAGES = 2


def is_supported_image(path: Path) -> bool:
    """Return True if *path* has a supported image extension (any case)."""
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def _sort_key(path: Path) -> tuple[str, str]:
    # Ordinal, case-insensitive, extension included.  The exact name breaks
    # ties so the result never depends on listing order.
    return path.name.upper(), path.name


def list_images(directory: Path | str) -> list[Path]:
    """List the supported images directly inside *directory*, in page order.

    Files are ordered by their full name compared case-insensitively,
    character by character.  This is not the "natural" order of file
    explorers: ``page10.png`` sorts before ``page2.png``, and ``file (1).jpg``
    sorts before ``file.jpg``.  Zero-padded numbers (``page_002.png``) give
    the expected sequence.
    """
    directory = Path(directory)
    images = [
        entry
        for entry in directory.iterdir()
        if entry.is_file() and is_supported_image(entry)
    ]
    return sorted(images, key=_sort_key)


def validate_directory(path: Path | str) -> Path:
    """Check that *path* is a directory holding at least two supported images.

    Raises:
        DirectoryNotFoundError: If *path* is not an existing directory.
        TooFewImagesError: If fewer than two supported images are found.
    """
    path = Path(path)
    if not path.is_dir():
        raise DirectoryNotFoundError(f"Directory not found: {path}")

    count = sum(
        1 for entry in path.iterdir() if entry.is_file() and is_supported_image(entry)
    )
    if count < MIN_IMAGES:
        raise TooFewImagesError(
            f"Contains less than {MIN_IMAGES} images ({count} found): {path}"
        )
    return path


def validate_directories(paths: Iterable[Path | str]) -> list[Path]:
    """Validate every path before any conversion starts.

    The first failing directory raises and nothing else is checked, so a
    batch either passes as a whole or is not started at all.
    """
    return [validate_directory(path) for path in paths]
