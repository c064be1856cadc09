"""
Batch print queue.

Print requests arriving in a burst are collected and printed as one relay
job. Every enqueue restarts a fixed delay timer (debounce), so a batch is
only flushed once requests stop arriving for the whole window. On flush
each template is rendered on its own, the PDFs are merged page-wise in
enqueue order, and the merged document goes to the relay as a single job.

Failure behavior: when rendering or submission raises, the entries stay
queued and the timer stays disarmed. Nothing retries on its own; the next
enqueue re-arms the timer and the retained entries go out with it.
"""

import functools
import threading
from typing import Callable, Optional, Protocol

from labelprint.label_generation.pdf_merge import merge_pdfs
from labelprint.label_generation.pdf_renderer import LabelPDFRenderer
from labelprint.logger import get_logger
from labelprint.models.printing import PrintOptions, QueueEntry, QueueStatus
from labelprint.printing.scheduler import Scheduler, TimerHandle

logger = get_logger(__name__)


class PrintRelay(Protocol):
    def submit_print_job(
        self,
        pdf_bytes: bytes,
        printer_id: int,
        options: PrintOptions | None = None
    ) -> Optional[int]:
        ...


class PrintDispatchQueue:
    """
    Debounced batch printing.

    By default the whole batch is printed on the first entry's printer with
    the first entry's options. With group_by_printer=True the batch is split
    into one job per distinct (printer, options) pair, in first-seen order.
    """

    def __init__(
        self,
        renderer: LabelPDFRenderer,
        relay_factory: Callable[[], PrintRelay],
        scheduler: Scheduler,
        delay_seconds: float = 3.0,
        group_by_printer: bool = False
    ):
        self.renderer = renderer
        self.relay_factory = relay_factory
        self.scheduler = scheduler
        self.delay_seconds = delay_seconds
        self.group_by_printer = group_by_printer

        self._lock = threading.Lock()
        self._entries: list[QueueEntry] = []
        self._in_flight: set[int] = set()  # id() of entries being printed
        self._timer: TimerHandle | None = None
        self._generation = 0  # Bumped on every (re)arm and clear

    def enqueue(self, entry: QueueEntry) -> int:
        """
        Add a print request and restart the debounce timer.

        Returns:
            Number of entries now queued
        """
        with self._lock:
            self._entries.append(entry)
            size = len(self._entries)
            self._arm_locked()

        logger.info("Label added to queue", extra={
            "queue_size": size,
            "printer_id": entry.printer_id,
            "template": entry.template.name,
            "delay_seconds": self.delay_seconds
        })

        return size

    def status(self) -> QueueStatus:
        with self._lock:
            return QueueStatus(
                queue_size=len(self._entries),
                is_processing=self._timer is not None or bool(self._in_flight)
            )

    def clear(self) -> int:
        """
        Drop every queued entry and disarm the timer.

        Returns:
            Number of entries discarded
        """
        with self._lock:
            cleared = len(self._entries)
            self._entries.clear()
            self._disarm_locked()

        logger.info("Queue cleared", extra={"cleared": cleared})
        return cleared

    def shutdown(self) -> None:
        """Disarm the timer. Pending entries are dropped with the process."""
        with self._lock:
            pending = len(self._entries)
            self._disarm_locked()

        if pending:
            logger.warning("Queue shut down with pending labels", extra={"pending": pending})

    def flush(self) -> list[Optional[int]]:
        """
        Print everything queued now.

        Entries already being printed by a concurrent flush are left to it.
        Successfully submitted entries leave the queue; on failure the
        failing entries (and any after them) stay.

        Returns:
            Relay job IDs of the submitted jobs
        """
        with self._lock:
            batch = [e for e in self._entries if id(e) not in self._in_flight]
            if not batch:
                logger.info("No labels to process")
                return []
            self._in_flight.update(id(e) for e in batch)

        logger.info("Processing label batch", extra={"labels": len(batch)})

        job_ids: list[Optional[int]] = []
        try:
            for printer_id, options, entries in self._batch_jobs(batch):
                try:
                    job_ids.append(self._print(printer_id, options, entries))
                except Exception as e:
                    logger.error("Batch print failed, labels kept in queue", extra={
                        "printer_id": printer_id,
                        "labels": len(entries),
                        "error": str(e)
                    }, exc_info=True)
                    break
                self._remove(entries)
        finally:
            with self._lock:
                self._in_flight.difference_update(id(e) for e in batch)

        return job_ids

    def _print(self, printer_id: int, options: PrintOptions, entries: list[QueueEntry]) -> Optional[int]:
        documents = [self.renderer.render(entry.template) for entry in entries]
        merged = merge_pdfs(documents)
        job_id = self.relay_factory().submit_print_job(merged, printer_id, options)

        logger.info("Batch printed", extra={
            "printer_id": printer_id,
            "labels": len(entries),
            "job_id": job_id
        })

        return job_id

    def _batch_jobs(self, batch: list[QueueEntry]) -> list[tuple[int, PrintOptions, list[QueueEntry]]]:
        """Split a batch into relay jobs."""
        if not self.group_by_printer:
            first = batch[0]
            return [(first.printer_id, first.print_options, batch)]

        groups: dict[tuple[int, str], list[QueueEntry]] = {}
        for entry in batch:
            key = (entry.printer_id, entry.print_options.group_key())
            groups.setdefault(key, []).append(entry)

        return [
            (entries[0].printer_id, entries[0].print_options, entries)
            for entries in groups.values()
        ]

    def _remove(self, entries: list[QueueEntry]) -> None:
        done = {id(e) for e in entries}
        with self._lock:
            self._entries = [e for e in self._entries if id(e) not in done]

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return  # Superseded by a later enqueue or a clear
            self._timer = None

        logger.info("Debounce window elapsed", extra={"delay_seconds": self.delay_seconds})
        self.flush()

    def _arm_locked(self) -> None:
        self._disarm_locked()
        self._timer = self.scheduler.call_later(
            self.delay_seconds,
            functools.partial(self._on_timer, self._generation)
        )

    def _disarm_locked(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
