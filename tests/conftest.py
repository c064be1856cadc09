"""
Pytest configuration and fixtures.
"""

import base64
import io
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from labelprint.label_generation import LabelPDFRenderer
from labelprint.logger import configure_logging
from labelprint.main import app
from labelprint.models.printing import PrintOptions, QueueEntry
from labelprint.models.template import Template
from labelprint.printing import PrintDispatchQueue, PrintNodeClient
from labelprint.storage.template_store import TemplateStore

configure_logging(log_level="warning", development=True)


class FakeTimer:
    def __init__(self, when: float, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock: callbacks only run inside advance()."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def call_later(self, delay_seconds, callback):
        timer = FakeTimer(self.now + delay_seconds, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float):
        target = self.now + seconds
        while True:
            due = sorted((t for t in self.pending if t.when <= target), key=lambda t: t.when)
            if not due:
                break
            timer = due[0]
            self.now = timer.when
            timer.fired = True
            timer.callback()
        self.now = target


@pytest.fixture
def fake_scheduler():
    """Deterministic scheduler."""
    return FakeScheduler()


@pytest.fixture
def fake_relay():
    """Relay client double; submit_print_job returns job 4242."""
    relay = Mock(spec=PrintNodeClient)
    relay.submit_print_job.return_value = 4242
    return relay


@pytest.fixture
def renderer():
    return LabelPDFRenderer()


@pytest.fixture
def print_queue(renderer, fake_relay, fake_scheduler):
    """Batch queue with a manual clock and the relay double."""
    return PrintDispatchQueue(
        renderer=renderer,
        relay_factory=lambda: fake_relay,
        scheduler=fake_scheduler,
        delay_seconds=3.0
    )


@pytest.fixture
def client(tmp_path, print_queue, fake_relay):
    """FastAPI test client with the relay and queue swapped for doubles."""
    with TestClient(app) as test_client:
        app.state.print_queue.shutdown()
        app.state.print_queue = print_queue
        app.state.relay_factory = lambda: fake_relay
        app.state.template_store = TemplateStore(tmp_path / "templates")
        yield test_client


@pytest.fixture
def template_store(tmp_path):
    return TemplateStore(tmp_path / "templates")


@pytest.fixture
def sample_template_data():
    """Template as the designer sends it."""
    return {
        "name": "Shelf Label",
        "widthMm": 50,
        "heightMm": 25,
        "elements": [
            {
                "id": "text-1",
                "type": "text",
                "text": "MTU Oil Filter",
                "x": 5,
                "y": 5,
                "fontSize": 12,
                "textColor": "#000000"
            },
            {
                "id": "qr-1",
                "type": "qrcode",
                "data": "https://example.com/parts/MTU-OF-4568",
                "x": 30,
                "y": 5,
                "size": 15
            }
        ]
    }


@pytest.fixture
def sample_template(sample_template_data):
    return Template.model_validate(sample_template_data)


@pytest.fixture
def make_entry(sample_template):
    """Build queue entries for a printer."""
    def _make(printer_id: int = 1, title: str | None = None, template: Template | None = None):
        return QueueEntry(
            template=template or sample_template,
            printer_id=printer_id,
            print_options=PrintOptions(title=title)
        )
    return _make


@pytest.fixture
def sample_image_bytes():
    """Sample PNG bytes."""
    img = Image.new('RGB', (100, 100), color='white')
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    buffer.seek(0)
    return buffer.getvalue()


@pytest.fixture
def sample_image_data_url(sample_image_bytes):
    """PNG as the designer embeds it."""
    return "data:image/png;base64," + base64.b64encode(sample_image_bytes).decode("ascii")
