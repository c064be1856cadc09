"""
PrintNode routes - pass-through access to the print relay.

Printers, computers, print jobs and account details are forwarded to the
relay. API key and webhook management need account-level credentials the
relay does not grant to API-key authentication, so those routes answer
with a fixed 403.
"""

from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from labelprint.dependencies import get_relay_client, get_relay_handler
from labelprint.handlers.relay_handler import RelayHandler
from labelprint.models.common import ErrorResponse
from labelprint.printing import PrintNodeClient

router = APIRouter()

RELAY_ERRORS = {
    500: {"model": ErrorResponse, "description": "Relay not configured or relay error"}
}


# =============================================================================
# Printers
# =============================================================================

@router.get("/printers", responses=RELAY_ERRORS, summary="List relay printers")
async def list_printers(client: PrintNodeClient = Depends(get_relay_client)) -> Any:
    return await run_in_threadpool(client.get_printers)


@router.get("/printers/{printer_id}", responses=RELAY_ERRORS, summary="Get printer")
async def get_printer(printer_id: int, client: PrintNodeClient = Depends(get_relay_client)) -> Any:
    return await run_in_threadpool(client.get_printer, printer_id)


@router.get("/printers/{printer_id}/capabilities", responses=RELAY_ERRORS, summary="Get printer capabilities")
async def get_printer_capabilities(printer_id: int, client: PrintNodeClient = Depends(get_relay_client)) -> Any:
    return await run_in_threadpool(client.get_printer_capabilities, printer_id)


# =============================================================================
# Print jobs
# =============================================================================

@router.get("/print-jobs", responses=RELAY_ERRORS, summary="List print jobs")
async def list_print_jobs(
    limit: int | None = Query(None, ge=1, le=500),
    after: int | None = Query(None, description="Return jobs with IDs after this one"),
    dir: Literal["asc", "desc"] | None = Query(None),
    printer: int | None = Query(None, description="Only jobs for this printer"),
    state: str | None = Query(None, description="Only jobs in this state"),
    date_from: datetime | None = Query(None, alias="dateFrom"),
    date_to: datetime | None = Query(None, alias="dateTo"),
    handler: RelayHandler = Depends(get_relay_handler)
) -> Any:
    return await handler.list_print_jobs(
        limit=limit,
        after=after,
        dir=dir,
        printer=printer,
        state=state,
        date_from=date_from,
        date_to=date_to
    )


@router.get("/print-jobs/{job_id}", responses=RELAY_ERRORS, summary="Get print job")
async def get_print_job(job_id: int, client: PrintNodeClient = Depends(get_relay_client)) -> Any:
    return await run_in_threadpool(client.get_print_job, job_id)


@router.delete("/print-jobs/{job_id}", responses=RELAY_ERRORS, summary="Cancel print job")
async def cancel_print_job(job_id: int, client: PrintNodeClient = Depends(get_relay_client)) -> Any:
    return await run_in_threadpool(client.cancel_print_job, job_id)


# =============================================================================
# Computers and account
# =============================================================================

@router.get("/computers", responses=RELAY_ERRORS, summary="List relay computers")
async def list_computers(client: PrintNodeClient = Depends(get_relay_client)) -> Any:
    return await run_in_threadpool(client.get_computers)


@router.get("/computers/{computer_id}", responses=RELAY_ERRORS, summary="Get computer")
async def get_computer(computer_id: int, client: PrintNodeClient = Depends(get_relay_client)) -> Any:
    return await run_in_threadpool(client.get_computer, computer_id)


@router.get("/account", responses=RELAY_ERRORS, summary="Relay account details")
async def get_account(client: PrintNodeClient = Depends(get_relay_client)) -> Any:
    return await run_in_threadpool(client.get_account)


# =============================================================================
# API keys and webhooks (not available with API key authentication)
# =============================================================================

class ApiKeyCreate(BaseModel):
    tag: str


class WebhookCreate(BaseModel):
    url: str
    events: list[str] = []


NOT_AVAILABLE = {403: {"model": ErrorResponse, "description": "Not available with API key authentication"}}


def _not_available(feature: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content=ErrorResponse(
            error_code="NOT_AVAILABLE",
            message=f"{feature} management is not available with API key authentication",
            details="Use the PrintNode dashboard to manage this resource"
        ).model_dump(mode="json")
    )


@router.get("/account/apikeys", responses=NOT_AVAILABLE, summary="List API keys (not available)")
async def list_api_keys():
    return _not_available("API key")


@router.post("/account/apikeys", responses=NOT_AVAILABLE, summary="Create API key (not available)")
async def create_api_key(body: ApiKeyCreate):
    return _not_available("API key")


@router.delete("/account/apikeys/{key_id}", responses=NOT_AVAILABLE, summary="Delete API key (not available)")
async def delete_api_key(key_id: str):
    return _not_available("API key")


@router.get("/account/webhooks", responses=NOT_AVAILABLE, summary="List webhooks (not available)")
async def list_webhooks():
    return _not_available("Webhook")


@router.post("/account/webhooks", responses=NOT_AVAILABLE, summary="Create webhook (not available)")
async def create_webhook(body: WebhookCreate):
    return _not_available("Webhook")


@router.delete("/account/webhooks/{webhook_id}", responses=NOT_AVAILABLE, summary="Delete webhook (not available)")
async def delete_webhook(webhook_id: str):
    return _not_available("Webhook")
