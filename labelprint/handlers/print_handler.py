"""
Print handler - rendering, immediate printing and the batch queue.
"""

from typing import Callable

from fastapi.concurrency import run_in_threadpool

from labelprint.label_generation import LabelPDFRenderer
from labelprint.logger import get_logger
from labelprint.models.printing import (
    PrintRequest,
    PrintResponse,
    QueueClearResponse,
    QueueEntry,
    QueueStatus,
)
from labelprint.models.template import Template
from labelprint.printing import PrintDispatchQueue, PrintNodeClient, get_printnode_client

logger = get_logger(__name__)


class PrintHandler:
    """Handles render and print requests."""

    def __init__(
        self,
        renderer: LabelPDFRenderer,
        queue: PrintDispatchQueue,
        relay_factory: Callable[[], PrintNodeClient] = get_printnode_client
    ):
        self.renderer = renderer
        self.queue = queue
        self.relay_factory = relay_factory

    async def render_pdf(self, template: Template) -> bytes:
        """
        Render a template to PDF bytes off the event loop.

        Args:
            template: Label template

        Returns:
            PDF bytes
        """
        pdf_bytes = await run_in_threadpool(self.renderer.render, template)

        logger.info("Template rendered", extra={
            "template": template.name,
            "size_bytes": len(pdf_bytes)
        })

        return pdf_bytes

    async def print_label(self, request: PrintRequest) -> PrintResponse:
        """
        Print a label now, or add it to the batch queue.

        Args:
            request: Template, printer and options

        Returns:
            Job ID for immediate prints, queue size for queued ones

        Raises:
            PrintNodeConfigError: If the relay key is missing (immediate only)
            PrintNodeAPIError: If the relay rejects the job (immediate only)
        """
        if request.use_queue:
            size = self.queue.enqueue(QueueEntry(
                template=request.template,
                printer_id=request.printer_id,
                print_options=request.print_options
            ))
            return PrintResponse(
                success=True,
                message=f"Label added to batch queue! ({size} labels pending)",
                queue_size=size
            )

        relay = self.relay_factory()
        pdf_bytes = await self.render_pdf(request.template)
        job_id = await run_in_threadpool(
            relay.submit_print_job,
            pdf_bytes,
            request.printer_id,
            request.print_options
        )

        return PrintResponse(
            success=True,
            message="Print job sent successfully",
            job_id=job_id
        )

    def queue_status(self) -> QueueStatus:
        return self.queue.status()

    def clear_queue(self) -> QueueClearResponse:
        cleared = self.queue.clear()
        return QueueClearResponse(message="Queue cleared", cleared=cleared)
