"""
Print job runner.

Composes each side of a job (front and back in parallel), waits for both
rasters, then hands them to the document assembler. A bounded semaphore
caps how many jobs may hold full-resolution rasters in memory at once.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List

from loguru import logger

from .assembler import DocumentAssembler, create_document_assembler
from .compositor import ImageCompositor, configure_imaging, create_compositor
from .config import AppConfig, get_config
from .errors import CapacityError
from .models import ComposedRaster, PrintJob


class PrintJobRunner:
    """Runs print jobs end to end; safe to share between request threads."""

    def __init__(self, config: AppConfig = None,
                 compositor: ImageCompositor = None,
                 assembler: DocumentAssembler = None):
        self.config = config or get_config()
        self.compositor = compositor or create_compositor(self.config)
        self.assembler = assembler or create_document_assembler()
        self._slots = threading.BoundedSemaphore(self.config.MAX_CONCURRENT_JOBS)
        configure_imaging(self.config)

    def compose_sides(self, job: PrintJob) -> List[ComposedRaster]:
        """Compose every side of the job, returning rasters in (front, back) order."""
        if not job.is_double_sided:
            return [self.compositor.compose_side(job.front, job.dimensions)]

        with ThreadPoolExecutor(max_workers=len(job.sides), thread_name_prefix='compose') as executor:
            futures = [
                executor.submit(self.compositor.compose_side, side, job.dimensions)
                for side in job.sides
            ]
            # result() re-raises the side's own error; the job fails as a whole
            return [future.result() for future in futures]

    def run(self, job: PrintJob) -> bytes:
        """Generate the print-ready PDF bytes for a job."""
        if not self._slots.acquire(timeout=self.config.JOB_ACQUIRE_TIMEOUT):
            raise CapacityError(
                "Too many print files are being generated right now",
                details={'max_concurrent_jobs': self.config.MAX_CONCURRENT_JOBS},
                suggestions=["Try again in a minute"]
            )

        try:
            start = time.monotonic()
            logger.info(f"Starting print job: {job.dimensions.width}x{job.dimensions.height}in, "
                        f"{'double' if job.is_double_sided else 'single'}-sided, "
                        f"bleed={job.options.include_bleed}, "
                        f"crop_marks={job.options.include_crop_marks}")

            rasters = self.compose_sides(job)
            back = rasters[1] if len(rasters) > 1 else None
            document = self.assembler.assemble(rasters[0], back, job.dimensions, job.options)

            logger.info(f"Print job complete in {time.monotonic() - start:.2f}s "
                        f"({len(document)} bytes)")
            return document
        finally:
            self._slots.release()


def create_job_runner(config: AppConfig = None) -> PrintJobRunner:
    """Factory function to create a PrintJobRunner instance."""
    return PrintJobRunner(config)
