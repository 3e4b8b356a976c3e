"""scanbind: Bind directories of scanned page images into sized PDF files."""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .assembler import PdfAssembler
from .errors import (
    ConversionError,
    DecodeError,
    DirectoryNotFoundError,
    InvalidSettingError,
    ResizeError,
    ScanBindError,
    TooFewImagesError,
    ValidationError,
    WriteError,
)
from .resampler import ResampledPage, resample_image
from .scale import PageSpec, ScaleConfig, compute_page_spec, compute_scale
from .validator import (
    SUPPORTED_EXTENSIONS,
    list_images,
    validate_directories,
    validate_directory,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BatchResult",
    "ConversionError",
    "DecodeError",
    "DirectoryNotFoundError",
    "DirectoryResult",
    "DirectoryState",
    "InvalidSettingError",
    "PageSpec",
    "PdfAssembler",
    "ResampledPage",
    "ResizeError",
    "SUPPORTED_EXTENSIONS",
    "ScaleConfig",
    "ScanBindError",
    "TooFewImagesError",
    "ValidationError",
    "WriteError",
    "compute_page_spec",
    "compute_scale",
    "convert_batch",
    "convert_directory",
    "list_images",
    "resample_image",
    "resolve_pdf_path",
    "validate_directories",
    "validate_directory",
]

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Path, int, int], None]


class DirectoryState(enum.Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class DirectoryResult:
    """Outcome of converting one source directory."""

    source: Path
    output_path: Path | None = None
    state: DirectoryState = DirectoryState.PENDING
    pages_written: int = 0
    total_pages: int = 0
    pdf_bytes: int = 0
    error: str | None = None


@dataclass
class BatchResult:
    """Outcome of a whole batch, one entry per input directory, in input order."""

    results: list[DirectoryResult] = field(default_factory=list)

    @property
    def completed(self) -> list[DirectoryResult]:
        return [r for r in self.results if r.state is DirectoryState.COMPLETED]

    @property
    def failed(self) -> list[DirectoryResult]:
        return [r for r in self.results if r.state is DirectoryState.FAILED]


def resolve_pdf_path(directory: Path | str) -> Path:
    """Return the PDF path for *directory*: same parent, suffix replaced by ``.pdf``.

    ``scans/book`` gives ``scans/book.pdf`` and ``scans/vol.1`` gives
    ``scans/vol.pdf``.  Symlinks are not followed: a linked directory gets
    its PDF beside the link.

    Raises:
        WriteError: If the path has no name to derive a file name from
            (e.g. the file-system root).
    """
    directory = Path(os.path.abspath(directory))
    try:
        return directory.with_suffix(".pdf")
    except ValueError as exc:
        raise WriteError(f"Cannot derive a PDF file name from {directory}") from exc


def convert_directory(
    directory: Path | str,
    scale: ScaleConfig,
    *,
    on_page: ProgressCallback | None = None,
) -> DirectoryResult:
    """Convert every supported image in *directory* into one PDF.

    Pages follow :func:`list_images` order and are sized from *scale*.  The
    directory is not re-validated here.

    Any error is caught, logged and recorded on the returned result with
    ``state`` set to :attr:`DirectoryState.FAILED`.  A partially written PDF
    is left in place.

    Args:
        directory: Source directory of page images.
        scale: The run's scale settings.
        on_page: Called as ``on_page(directory, index, total)`` after each
            page is added, with a 1-based *index*.

    Returns:
        A :class:`DirectoryResult` in state ``COMPLETED`` or ``FAILED``.
    """
    result = DirectoryResult(source=Path(directory))
    _convert(result, scale, on_page=on_page)
    return result


def _convert(
    result: DirectoryResult,
    scale: ScaleConfig,
    *,
    on_page: ProgressCallback | None,
) -> None:
    directory = result.source
    result.state = DirectoryState.CONVERTING

    try:
        result.output_path = resolve_pdf_path(directory)
        images = list_images(directory)
        result.total_pages = len(images)

        with PdfAssembler(result.output_path) as pdf:
            for index, image_path in enumerate(images, start=1):
                pdf.add_page(resample_image(image_path, scale))
                result.pages_written = index
                if on_page is not None:
                    on_page(directory, index, len(images))
            result.pdf_bytes = pdf.finalize()
    except Exception as exc:
        # Directory boundary: record the failure and let the batch go on.
        result.state = DirectoryState.FAILED
        result.error = f"{type(exc).__name__}: {exc}"
        logger.warning("Failed to convert %s: %s", directory, result.error)
        logger.debug("Traceback for %s", directory, exc_info=True)
        return

    result.state = DirectoryState.COMPLETED
    logger.info(
        "Created %s (%d pages, %d bytes)",
        result.output_path,
        result.pages_written,
        result.pdf_bytes,
    )


def convert_batch(
    directories: Iterable[Path | str],
    scale: ScaleConfig,
    *,
    on_page: ProgressCallback | None = None,
    on_directory_done: Callable[[DirectoryResult], None] | None = None,
    validate: bool = True,
) -> BatchResult:
    """Validate all *directories*, then convert them one after another.

    Pass ``validate=False`` when the directories already went through
    :func:`validate_directories`; a directory that fails then simply ends
    up ``FAILED``.

    Raises:
        ValidationError: If any directory fails the pre-flight check.  No
            PDF is written in that case.

    Example::

        from scanbind import compute_scale, convert_batch

        batch = convert_batch(["scans/book"], compute_scale(600, 2))
        for result in batch.failed:
            print(result.source, result.error)
    """
    batch = BatchResult(results=[DirectoryResult(source=Path(d)) for d in directories])

    if validate:
        for result in batch.results:
            result.state = DirectoryState.VALIDATING
            validate_directory(result.source)

    for result in batch.results:
        _convert(result, scale, on_page=on_page)
        if on_directory_done is not None:
            on_directory_done(result)

    return batch
