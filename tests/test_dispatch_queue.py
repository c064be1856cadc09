"""
Tests for the debounced batch print queue.
"""

import pytest

from labelprint.label_generation.pdf_merge import count_pages
from labelprint.models.printing import PrintOptions, QueueEntry
from labelprint.printing import PrintDispatchQueue, PrintNodeAPIError, PrintNodeConfigError


def _submitted(fake_relay, call_index=0):
    """(pdf_bytes, printer_id, options) of a submit_print_job call."""
    args, kwargs = fake_relay.submit_print_job.call_args_list[call_index]
    return args[0], args[1], args[2]


class TestDebounce:
    """Timer behavior."""

    def test_enqueue_returns_queue_size(self, print_queue, make_entry):
        assert print_queue.enqueue(make_entry()) == 1
        assert print_queue.enqueue(make_entry()) == 2
        assert print_queue.enqueue(make_entry()) == 3

    def test_burst_is_one_job(self, print_queue, make_entry, fake_scheduler, fake_relay):
        """N enqueues inside the window produce one job with N pages."""
        for _ in range(5):
            print_queue.enqueue(make_entry())
            fake_scheduler.advance(0.5)

        fake_scheduler.advance(3.0)

        fake_relay.submit_print_job.assert_called_once()
        pdf_bytes, printer_id, _ = _submitted(fake_relay)
        assert count_pages(pdf_bytes) == 5
        assert printer_id == 1
        assert print_queue.status().queue_size == 0

    def test_enqueue_restarts_window(self, print_queue, make_entry, fake_scheduler, fake_relay):
        """Second enqueue at 500ms moves the flush to 3.5s."""
        print_queue.enqueue(make_entry())
        fake_scheduler.advance(0.5)
        print_queue.enqueue(make_entry())

        fake_scheduler.advance(2.9)
        fake_relay.submit_print_job.assert_not_called()
        assert print_queue.status().queue_size == 2

        fake_scheduler.advance(0.1)
        fake_relay.submit_print_job.assert_called_once()
        assert count_pages(_submitted(fake_relay)[0]) == 2

    def test_only_one_timer_armed(self, print_queue, make_entry, fake_scheduler):
        for _ in range(4):
            print_queue.enqueue(make_entry())

        assert len(fake_scheduler.pending) == 1

    def test_stale_timer_ignored(self, print_queue, make_entry, fake_scheduler, fake_relay):
        """A superseded callback that fires anyway does nothing."""
        print_queue.enqueue(make_entry())
        stale = fake_scheduler.timers[0]
        print_queue.enqueue(make_entry())

        stale.callback()

        fake_relay.submit_print_job.assert_not_called()
        assert print_queue.status().queue_size == 2

    def test_pages_in_enqueue_order(self, print_queue, fake_scheduler, fake_relay):
        from io import BytesIO
        from pypdf import PdfReader
        from labelprint.models.template import Template

        for width in (40, 60, 80):
            template = Template.model_validate({"name": f"w{width}", "widthMm": width, "heightMm": 20})
            print_queue.enqueue(QueueEntry(template=template, printer_id=7))

        fake_scheduler.advance(3.0)

        reader = PdfReader(BytesIO(_submitted(fake_relay)[0]))
        widths = [float(page.mediabox.width) for page in reader.pages]
        assert widths == pytest.approx([40 * 2.835, 60 * 2.835, 80 * 2.835], abs=0.01)


class TestClear:
    """Clearing the queue."""

    def test_clear_drops_entries_and_timer(self, print_queue, make_entry, fake_scheduler, fake_relay):
        print_queue.enqueue(make_entry())
        print_queue.enqueue(make_entry())

        assert print_queue.clear() == 2

        fake_scheduler.advance(10)
        fake_relay.submit_print_job.assert_not_called()
        status = print_queue.status()
        assert status.queue_size == 0
        assert status.is_processing is False

    def test_clear_empty_queue(self, print_queue):
        assert print_queue.clear() == 0

    def test_shutdown_disarms(self, print_queue, make_entry, fake_scheduler, fake_relay):
        print_queue.enqueue(make_entry())

        print_queue.shutdown()
        fake_scheduler.advance(10)

        fake_relay.submit_print_job.assert_not_called()


class TestStatus:
    def test_idle(self, print_queue):
        status = print_queue.status()

        assert status.queue_size == 0
        assert status.is_processing is False

    def test_timer_armed(self, print_queue, make_entry):
        print_queue.enqueue(make_entry())

        status = print_queue.status()
        assert status.queue_size == 1
        assert status.is_processing is True

    def test_after_flush(self, print_queue, make_entry, fake_scheduler):
        print_queue.enqueue(make_entry())
        fake_scheduler.advance(3.0)

        status = print_queue.status()
        assert status.queue_size == 0
        assert status.is_processing is False

    def test_processing_during_submission(self, print_queue, make_entry, fake_scheduler, fake_relay):
        seen = []
        fake_relay.submit_print_job.side_effect = lambda *args: seen.append(print_queue.status()) or 1

        print_queue.enqueue(make_entry())
        fake_scheduler.advance(3.0)

        assert seen[0].is_processing is True
        assert seen[0].queue_size == 1


class TestBatchTarget:
    """Which printer and options a batch goes out with."""

    def test_first_entry_wins(self, print_queue, make_entry, fake_scheduler, fake_relay):
        print_queue.enqueue(make_entry(printer_id=11, title="first"))
        print_queue.enqueue(make_entry(printer_id=22, title="second"))

        fake_scheduler.advance(3.0)

        fake_relay.submit_print_job.assert_called_once()
        pdf_bytes, printer_id, options = _submitted(fake_relay)
        assert printer_id == 11
        assert options.title == "first"
        assert count_pages(pdf_bytes) == 2

    def test_group_by_printer(self, renderer, fake_relay, fake_scheduler, make_entry):
        queue = PrintDispatchQueue(
            renderer=renderer,
            relay_factory=lambda: fake_relay,
            scheduler=fake_scheduler,
            group_by_printer=True
        )
        queue.enqueue(make_entry(printer_id=11))
        queue.enqueue(make_entry(printer_id=22))
        queue.enqueue(make_entry(printer_id=11))

        fake_scheduler.advance(3.0)

        assert fake_relay.submit_print_job.call_count == 2
        first_pdf, first_printer, _ = _submitted(fake_relay, 0)
        second_pdf, second_printer, _ = _submitted(fake_relay, 1)
        assert (first_printer, count_pages(first_pdf)) == (11, 2)
        assert (second_printer, count_pages(second_pdf)) == (22, 1)
        assert queue.status().queue_size == 0

    def test_group_by_options(self, renderer, fake_relay, fake_scheduler, make_entry):
        queue = PrintDispatchQueue(
            renderer=renderer,
            relay_factory=lambda: fake_relay,
            scheduler=fake_scheduler,
            group_by_printer=True
        )
        queue.enqueue(make_entry(printer_id=11, title="a"))
        queue.enqueue(make_entry(printer_id=11, title="b"))

        fake_scheduler.advance(3.0)

        assert fake_relay.submit_print_job.call_count == 2

    def test_flush_returns_job_ids(self, print_queue, make_entry):
        print_queue.enqueue(make_entry())

        assert print_queue.flush() == [4242]

    def test_flush_empty_queue(self, print_queue, fake_relay):
        assert print_queue.flush() == []
        fake_relay.submit_print_job.assert_not_called()


class TestFailure:
    """Entries survive a failed batch."""

    def test_relay_error_keeps_entries(self, print_queue, make_entry, fake_scheduler, fake_relay):
        fake_relay.submit_print_job.side_effect = PrintNodeAPIError("offline", status_code=503)

        print_queue.enqueue(make_entry())
        print_queue.enqueue(make_entry())
        fake_scheduler.advance(3.0)

        status = print_queue.status()
        assert status.queue_size == 2
        assert status.is_processing is False

    def test_no_automatic_retry(self, print_queue, make_entry, fake_scheduler, fake_relay):
        fake_relay.submit_print_job.side_effect = PrintNodeAPIError("offline", status_code=503)

        print_queue.enqueue(make_entry())
        fake_scheduler.advance(30)

        assert fake_relay.submit_print_job.call_count == 1
        assert fake_scheduler.pending == []

    def test_retained_entries_go_with_next_batch(self, print_queue, make_entry, fake_scheduler, fake_relay):
        fake_relay.submit_print_job.side_effect = [PrintNodeAPIError("offline", status_code=503), 99]

        print_queue.enqueue(make_entry())
        fake_scheduler.advance(3.0)
        print_queue.enqueue(make_entry())
        fake_scheduler.advance(3.0)

        assert fake_relay.submit_print_job.call_count == 2
        assert count_pages(_submitted(fake_relay, 1)[0]) == 2
        assert print_queue.status().queue_size == 0

    def test_missing_credentials_keep_entries(self, renderer, fake_scheduler, make_entry):
        def relay_factory():
            raise PrintNodeConfigError("PRINTNODE_API_KEY is not set")

        queue = PrintDispatchQueue(renderer=renderer, relay_factory=relay_factory, scheduler=fake_scheduler)
        queue.enqueue(make_entry())
        fake_scheduler.advance(3.0)

        assert queue.status().queue_size == 1

    def test_entries_enqueued_during_flush_survive(self, print_queue, make_entry, fake_scheduler, fake_relay):
        late = make_entry(printer_id=5)

        def submit(*args):
            print_queue.enqueue(late)
            return 1

        fake_relay.submit_print_job.side_effect = submit

        print_queue.enqueue(make_entry())
        fake_scheduler.advance(3.0)

        status = print_queue.status()
        assert status.queue_size == 1
        assert status.is_processing is True

    def test_group_failure_stops_later_groups(self, renderer, fake_relay, fake_scheduler, make_entry):
        queue = PrintDispatchQueue(
            renderer=renderer,
            relay_factory=lambda: fake_relay,
            scheduler=fake_scheduler,
            group_by_printer=True
        )
        fake_relay.submit_print_job.side_effect = [1, PrintNodeAPIError("rejected", status_code=400), 3]

        queue.enqueue(make_entry(printer_id=1))
        queue.enqueue(make_entry(printer_id=2))
        queue.enqueue(make_entry(printer_id=3))
        fake_scheduler.advance(3.0)

        assert fake_relay.submit_print_job.call_count == 2
        assert queue.status().queue_size == 2


def test_entry_defaults(sample_template):
    entry = QueueEntry(template=sample_template, printer_id=3)

    assert entry.print_options == PrintOptions()
