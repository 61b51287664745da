"""Row-parallel rendering on a concurrent.futures executor.

Pixels share nothing but the read-only camera and resolver, so each image row
can be rendered as an independent job. Every row gets its own child random
stream, split from the caller's source in row order; the output therefore
depends only on the seed, never on the worker count or scheduling.

Example:
    >>> from src.lenscast.core.parallel import ParallelRenderer
    >>> from src.lenscast.core.sampler import NumpyRandomSource
    >>>
    >>> renderer = ParallelRenderer(options, max_workers=4)
    >>> image = renderer.render_image(NumpyRandomSource.from_seed(3))
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed

from src.lenscast.core.integrator import (
    ColourResolver,
    EncoderFactory,
    ProgressCallback,
    Renderer,
    RenderOptions,
)
from src.lenscast.core.sampler import NumpyRandomSource
from src.lenscast.core.spectrum import Colour
from src.lenscast.preview.export import Encoder, ImageEncoder

logger = logging.getLogger(__name__)


class ParallelRenderer(Renderer):
    """Renderer that farms rows out to a pool of workers.

    Attributes:
        max_workers: Pool size used when no executor is supplied.
    """

    def __init__(
        self,
        options: RenderOptions,
        resolver: ColourResolver | None = None,
        encoder_factory: EncoderFactory = ImageEncoder,
        *,
        max_workers: int | None = None,
        executor: Executor | None = None,
    ) -> None:
        """Initialize the parallel renderer.

        Args:
            options: Render configuration.
            resolver: Colour resolver shared by all workers (read-only).
            encoder_factory: Builds the encoder used by render().
            max_workers: Thread count for the internal pool. None lets
                ThreadPoolExecutor choose.
            executor: Caller-owned executor to submit rows to instead of an
                internal thread pool. It is not shut down by the renderer.
        """
        super().__init__(options, resolver, encoder_factory)
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self._executor = executor

    def _render_rows(
        self,
        executor: Executor,
        row_sources: list[NumpyRandomSource],
        encoder: Encoder,
        callback: ProgressCallback | None,
    ) -> None:
        futures = {
            executor.submit(self.render_row, j, source): j
            for j, source in enumerate(row_sources)
        }
        finished: dict[int, list[Colour]] = {}
        for done, future in enumerate(as_completed(futures), start=1):
            finished[futures[future]] = future.result()
            logger.debug(f"Lines remaining: {self.height - done}")
            if callback is not None:
                callback(done, self.height)

        # Pixels are written on the calling thread only.
        for j in range(self.height):
            self._write_row(encoder, j, finished[j])

    def render_into(
        self,
        encoder: Encoder,
        rng: NumpyRandomSource,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the full image into `encoder` using one job per row.

        Args:
            encoder: Destination for the pixels.
            rng: Parent source; split into one child stream per row.
            callback: Optional callback called as rows complete with
                (rows_completed, total_rows). Rows may finish out of order.

        An exception raised by any row job propagates to the caller and no
        pixels are written.
        """
        row_sources = rng.spawn(self.height)

        if self._executor is not None:
            self._render_rows(self._executor, row_sources, encoder, callback)
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            self._render_rows(executor, row_sources, encoder, callback)
