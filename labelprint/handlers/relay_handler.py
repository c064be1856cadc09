"""
Relay handler - print job listing with the filters the relay lacks.
"""

from datetime import datetime, timezone
from typing import Literal

from fastapi.concurrency import run_in_threadpool

from labelprint.logger import get_logger
from labelprint.printing import PrintNodeClient

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _parse_timestamp(value: str | None) -> datetime | None:
    """Parse a relay timestamp such as 2015-11-16T23:14:12.354Z."""
    if not value:
        return None
    try:
        return _as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


class RelayHandler:
    """Wraps relay calls that need more than a straight pass-through."""

    def __init__(self, client: PrintNodeClient):
        self.client = client

    async def list_print_jobs(
        self,
        limit: int | None = None,
        after: int | None = None,
        dir: Literal["asc", "desc"] | None = None,
        printer: int | None = None,
        state: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None
    ) -> list[dict]:
        """
        List print jobs.

        limit/after/dir are paging parameters handled by the relay.
        printer selects the relay's per-printer listing. state and the
        date range filter the returned page on state and createTimestamp.

        Returns:
            Relay print job objects
        """
        params = {"limit": limit, "after": after, "dir": dir}

        if printer is not None:
            jobs = await run_in_threadpool(self.client.get_printer_print_jobs, printer, params)
        else:
            jobs = await run_in_threadpool(self.client.get_print_jobs, params)

        jobs = jobs or []
        total = len(jobs)

        if state:
            jobs = [job for job in jobs if job.get("state") == state]

        if date_from or date_to:
            start = _as_utc(date_from) if date_from else None
            end = _as_utc(date_to) if date_to else None
            filtered = []
            for job in jobs:
                created = _parse_timestamp(job.get("createTimestamp"))
                if created is None:
                    continue
                if start and created < start:
                    continue
                if end and created > end:
                    continue
                filtered.append(job)
            jobs = filtered

        logger.info("Print jobs listed", extra={
            "printer": printer,
            "returned": len(jobs),
            "filtered_out": total - len(jobs)
        })

        return jobs
