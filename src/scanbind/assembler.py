"""Assemble resampled page images into a single PDF file."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

import img2pdf
import pikepdf
from pikepdf import settings as pikepdf_settings

from .errors import WriteError
from .resampler import ResampledPage
from .scale import PageSpec

logger = logging.getLogger(__name__)

FLATE_COMPRESSION_LEVEL = 9


class PdfAssembler:
    """Forward-only PDF writer: pages go in one at a time, in order.

    Use as a context manager.  Entering creates (or truncates) the output
    file, leaving always releases the file handle and the page spool,
    whether or not :meth:`finalize` ran.  If the ``with`` block is left
    before finalizing, whatever is already in the output file stays there.

    Encoded pages are spooled to a temporary directory rather than kept in
    memory, and the intermediate PDF is written into the same spool, so a
    directory of a few thousand scans never holds more than a page or two
    in Python memory.

    Example::

        with PdfAssembler(Path("book.pdf")) as pdf:
            for image in images:
                pdf.add_page(resample_image(image, scale))
            pdf.finalize()
    """

    def __init__(self, output_path: Path | str) -> None:
        self.output_path = Path(output_path)
        self._handle: BinaryIO | None = None
        self._spool: tempfile.TemporaryDirectory | None = None
        self._page_files: list[Path] = []
        self._page_specs: list[PageSpec] = []
        self._finalized = False

    @property
    def page_count(self) -> int:
        return len(self._page_files)

    def __enter__(self) -> PdfAssembler:
        self.begin()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def begin(self) -> None:
        """Create or truncate the output file and open the page spool.

        Raises:
            WriteError: If the output file cannot be created.
        """
        try:
            self._handle = self.output_path.open("wb")
        except OSError as exc:
            raise WriteError(f"Cannot create {self.output_path}: {exc}") from exc

        try:
            self._spool = tempfile.TemporaryDirectory(prefix="scanbind_")
        except OSError as exc:
            self.close()
            raise WriteError(f"Cannot create page spool directory: {exc}") from exc

    def add_page(self, page: ResampledPage) -> None:
        """Append *page* after every page added so far.

        The page's media box is set to the page's size in points before its
        content is placed, and the image fills it exactly from the
        bottom-left corner.

        Raises:
            WriteError: If the document is not open or already finalized.
        """
        if self._handle is None or self._spool is None or self._finalized:
            raise WriteError(f"{self.output_path} is not open for writing")

        page_file = Path(self._spool.name) / f"page_{self.page_count + 1:05d}.jpg"
        try:
            page_file.write_bytes(page.data)
        except OSError as exc:
            raise WriteError(f"Cannot spool page from {page.source}: {exc}") from exc

        self._page_files.append(page_file)
        self._page_specs.append(page.spec)

    def _layout_fun(self) -> Callable[[int, int, object], tuple[float, float, float, float]]:
        """Return an img2pdf layout function that replays the recorded page sizes."""
        specs = iter(self._page_specs)

        def layout(imgwidthpx: int, imgheightpx: int, ndpi: object) -> tuple[float, float, float, float]:
            spec = next(specs)
            if (imgwidthpx, imgheightpx) != (spec.width_px, spec.height_px):
                raise WriteError(
                    f"Page image is {imgwidthpx}x{imgheightpx} pixels, "
                    f"expected {spec.width_px}x{spec.height_px}"
                )
            return spec.width_pts, spec.height_pts, spec.width_pts, spec.height_pts

        return layout

    def finalize(self) -> int:
        """Write every added page to the output file.

        The PDF is built by img2pdf, which embeds the JPEG data as-is, into a
        file in the spool.  pikepdf then copies it into the output with
        level-9 flate streams and object streams, so the document structure
        is compressed too.

        Returns:
            Size of the written PDF in bytes.

        Raises:
            WriteError: If no pages were added, the document is not open, or
                the PDF cannot be written.
        """
        if self._handle is None or self._spool is None or self._finalized:
            raise WriteError(f"{self.output_path} is not open for writing")
        if not self._page_files:
            raise WriteError(f"No pages added to {self.output_path}")

        try:
            draft = Path(self._spool.name) / "draft.pdf"
            with draft.open("wb") as draft_stream:
                img2pdf.convert(
                    [str(p) for p in self._page_files],
                    layout_fun=self._layout_fun(),
                    outputstream=draft_stream,
                )

            pikepdf_settings.set_flate_compression_level(FLATE_COMPRESSION_LEVEL)
            with pikepdf.open(draft) as pdf:
                pdf.save(
                    self._handle,
                    compress_streams=True,
                    recompress_flate=True,
                    object_stream_mode=pikepdf.ObjectStreamMode.generate,
                )
            self._handle.flush()
        except (img2pdf.ImageOpenError, img2pdf.PdfTooLargeError, pikepdf.PdfError, OSError) as exc:
            raise WriteError(f"Cannot write {self.output_path}: {exc}") from exc

        self._finalized = True
        size = self._handle.tell()
        logger.debug("Wrote %d pages (%d bytes) to %s", self.page_count, size, self.output_path)
        return size

    def close(self) -> None:
        """Release the output file handle and delete the page spool."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        if self._spool is not None:
            self._spool.cleanup()
            self._spool = None
