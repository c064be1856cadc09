"""
Print routes - immediate and batched printing, queue control.
"""

from fastapi import APIRouter, Depends, status

from labelprint.dependencies import get_print_handler
from labelprint.handlers.print_handler import PrintHandler
from labelprint.logger import get_logger
from labelprint.models.common import ErrorResponse
from labelprint.models.printing import (
    PrintRequest,
    PrintResponse,
    QueueClearResponse,
    QueueStatus,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/print",
    response_model=PrintResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    responses={
        413: {"model": ErrorResponse, "description": "Request body too large"},
        500: {"model": ErrorResponse, "description": "Relay not configured or rejected the job"}
    },
    summary="Print a label",
    description="""
    Print a label template on a relay printer.

    - useQueue=false: render and submit one job now, returns jobId
    - useQueue=true: add to the batch queue; the batch is printed as one
      merged job once no new labels arrive for the debounce window
    """
)
async def print_label(
    request: PrintRequest,
    handler: PrintHandler = Depends(get_print_handler)
):
    logger.info("Print requested", extra={
        "template": request.template.name,
        "printer_id": request.printer_id,
        "use_queue": request.use_queue
    })

    return await handler.print_label(request)


@router.get(
    "/queue/status",
    response_model=QueueStatus,
    summary="Batch queue status"
)
async def queue_status(handler: PrintHandler = Depends(get_print_handler)):
    return handler.queue_status()


@router.post(
    "/queue/clear",
    response_model=QueueClearResponse,
    summary="Discard all queued labels"
)
async def clear_queue(handler: PrintHandler = Depends(get_print_handler)):
    return handler.clear_queue()
