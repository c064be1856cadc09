"""
PrintNode cloud print relay client.

Thin wrapper over the PrintNode REST API. Every method maps to exactly one
endpoint; authentication is HTTP Basic with the API key as username and an
empty password. Relay failures are raised with the relay's status code and
body untouched. No retries, no caching.
"""

import base64
from typing import Any, Optional

import requests

from labelprint.config import settings
from labelprint.logger import get_logger
from labelprint.models.printing import PrintOptions

logger = get_logger(__name__)


class PrintNodeError(Exception):
    """Base class for print relay failures."""
    pass


class PrintNodeConfigError(PrintNodeError):
    """Relay credentials are missing."""
    pass


class PrintNodeAPIError(PrintNodeError):
    """Relay returned an error status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


DEFAULT_JOB_TITLE = "Label Print Job"
DEFAULT_JOB_SOURCE = "Label Print Service"

# Orientation names accepted from the designer -> PrintNode rotate values
ORIENTATION_ROTATION = {"portrait": 0, "landscape": 90}


def build_print_job(pdf_bytes: bytes, printer_id: int, options: PrintOptions | None = None) -> dict:
    """
    Build a PrintNode print job payload.

    Args:
        pdf_bytes: Document to print
        printer_id: PrintNode printer ID
        options: Job title/source and printer options

    Returns:
        JSON-serializable payload for POST /printjobs
    """
    options = options or PrintOptions()

    job: dict[str, Any] = {
        "printerId": int(printer_id),
        "title": options.title or DEFAULT_JOB_TITLE,
        "contentType": "pdf_base64",
        "content": base64.b64encode(pdf_bytes).decode("ascii"),
        "source": options.source or DEFAULT_JOB_SOURCE,
    }

    if options.expire_after is not None:
        job["expireAfter"] = options.expire_after
    if options.qty is not None:
        job["qty"] = options.qty
    if options.authentication:
        job["authentication"] = options.authentication

    printer_options: dict[str, Any] = {}
    if options.copies is not None:
        printer_options["copies"] = options.copies
    if options.duplex:
        printer_options["duplex"] = options.duplex
    if options.media:
        printer_options["paper"] = options.media
    if options.dpi:
        printer_options["dpi"] = options.dpi
    if options.fit_to_page is not None:
        printer_options["fit_to_page"] = options.fit_to_page
    if options.page_range:
        printer_options["pages"] = options.page_range
    if options.orientation and options.orientation.lower() in ORIENTATION_ROTATION:
        printer_options["rotate"] = ORIENTATION_ROTATION[options.orientation.lower()]

    if printer_options:
        job["options"] = printer_options

    return job


class PrintNodeClient:
    """Authenticated client for the PrintNode REST API."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.printnode.com",
        timeout: float | None = None,
        session: requests.Session | None = None
    ):
        if not api_key:
            raise PrintNodeConfigError("PrintNode API key not configured")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (api_key, "")

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json: Any = None
    ) -> Any:
        """
        Call one relay endpoint.

        Raises:
            PrintNodeAPIError: On transport failure or non-2xx status
        """
        url = f"{self.base_url}{endpoint}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = self.session.request(
                method,
                url,
                params=params or None,
                json=json,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("PrintNode request failed", extra={
                "method": method,
                "endpoint": endpoint,
                "error": str(e)
            })
            raise PrintNodeAPIError(f"PrintNode request failed: {e}") from e

        if not response.ok:
            body = self._response_body(response)
            logger.error("PrintNode API error", extra={
                "method": method,
                "endpoint": endpoint,
                "status_code": response.status_code,
                "body": body
            })
            raise PrintNodeAPIError(
                f"PrintNode API returned {response.status_code}",
                status_code=response.status_code,
                body=body
            )

        return self._response_body(response)

    @staticmethod
    def _response_body(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    # =========================================================================
    # Print jobs
    # =========================================================================

    def submit_print_job(
        self,
        pdf_bytes: bytes,
        printer_id: int,
        options: PrintOptions | None = None
    ) -> Optional[int]:
        """
        Submit a PDF for printing.

        Args:
            pdf_bytes: Document to print
            printer_id: PrintNode printer ID
            options: Job title/source and printer options

        Returns:
            Relay job ID
        """
        job = build_print_job(pdf_bytes, printer_id, options)
        result = self._request("POST", "/printjobs", json=job)

        # The relay answers with the bare job ID
        job_id = result.get("id") if isinstance(result, dict) else result

        logger.info("Print job submitted", extra={
            "printer_id": printer_id,
            "job_id": job_id,
            "title": job["title"],
            "size_bytes": len(pdf_bytes)
        })

        return job_id

    def get_print_jobs(self, params: dict | None = None) -> list[dict]:
        return self._request("GET", "/printjobs", params=params)

    def get_printer_print_jobs(self, printer_id: int, params: dict | None = None) -> list[dict]:
        return self._request("GET", f"/printers/{printer_id}/printjobs", params=params)

    def get_print_job(self, job_id: int) -> list[dict]:
        return self._request("GET", f"/printjobs/{job_id}")

    def cancel_print_job(self, job_id: int) -> list[int]:
        return self._request("DELETE", f"/printjobs/{job_id}")

    # =========================================================================
    # Printers and computers
    # =========================================================================

    def get_printers(self) -> list[dict]:
        return self._request("GET", "/printers")

    def get_printer(self, printer_id: int) -> list[dict]:
        return self._request("GET", f"/printers/{printer_id}")

    def get_printer_capabilities(self, printer_id: int) -> Any:
        return self._request("GET", f"/printers/{printer_id}/capabilities")

    def get_computers(self) -> list[dict]:
        return self._request("GET", "/computers")

    def get_computer(self, computer_id: int) -> list[dict]:
        return self._request("GET", f"/computers/{computer_id}")

    # =========================================================================
    # Account
    # =========================================================================

    def get_account(self) -> dict:
        return self._request("GET", "/account")

    def get_api_keys(self) -> Any:
        return self._request("GET", "/account/apikeys")

    def create_api_key(self, tag: str) -> Any:
        return self._request("POST", "/account/apikeys", json={"tag": tag})

    def delete_api_key(self, key_id: str) -> Any:
        return self._request("DELETE", f"/account/apikeys/{key_id}")

    def get_webhooks(self) -> Any:
        return self._request("GET", "/account/webhooks")

    def create_webhook(self, url: str, events: list[str] | None = None) -> Any:
        return self._request("POST", "/account/webhooks", json={"url": url, "events": events or []})

    def delete_webhook(self, webhook_id: str) -> Any:
        return self._request("DELETE", f"/account/webhooks/{webhook_id}")


def get_printnode_client() -> PrintNodeClient:
    """
    Build a relay client from settings.

    Raises:
        PrintNodeConfigError: If PRINTNODE_API_KEY is not set
    """
    return PrintNodeClient(
        api_key=settings.printnode_api_key,
        base_url=settings.printnode_base_url,
        timeout=settings.printnode_timeout_seconds
    )
