"""
Render routes - template to PDF for preview and download.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from labelprint.dependencies import get_print_handler
from labelprint.handlers.print_handler import PrintHandler
from labelprint.logger import get_logger
from labelprint.models.common import ErrorResponse
from labelprint.models.template import Template

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/render/pdf",
    response_class=Response,
    status_code=status.HTTP_200_OK,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Rendered label"},
        413: {"model": ErrorResponse, "description": "Request body too large"},
        422: {"description": "Invalid template"},
        500: {"model": ErrorResponse, "description": "Rendering failed"}
    },
    summary="Render template to PDF",
    description="""
    Render a label template to a single-page PDF.

    - Page size equals the label size (1 mm = 2.835 pt), zero margins
    - Elements painted in list order, later elements on top
    - QR/barcode/image failures become red placeholder boxes
    - Unknown element types are skipped
    """
)
@router.post(
    "/render-pdf",
    response_class=Response,
    include_in_schema=False
)
async def render_pdf(
    template: Template,
    handler: PrintHandler = Depends(get_print_handler)
):
    """
    Render a template.

    Returns:
        PDF file (application/pdf)

    Raises:
        HTTPException: If rendering fails
    """
    try:
        pdf_bytes = await handler.render_pdf(template)

        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={
                "Content-Disposition": f'inline; filename="{_download_name(template.name)}.pdf"'
            }
        )

    except Exception as e:
        logger.error("Template PDF rendering failed", extra={
            "template": template.name,
            "error": str(e)
        }, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "render_failed", "message": "Failed to render label PDF"}
        )


def _download_name(name: str) -> str:
    safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in name)
    return safe[:100] or "label"
