"""
FastAPI dependencies resolving the per-app service objects.

The objects themselves are created in the application lifespan and kept
on app.state, so tests can swap any of them.
"""

from fastapi import Request

from labelprint.handlers.print_handler import PrintHandler
from labelprint.handlers.relay_handler import RelayHandler
from labelprint.printing import PrintDispatchQueue, PrintNodeClient
from labelprint.storage.template_store import TemplateStore


def get_print_queue(request: Request) -> PrintDispatchQueue:
    return request.app.state.print_queue


def get_template_store(request: Request) -> TemplateStore:
    return request.app.state.template_store


def get_relay_client(request: Request) -> PrintNodeClient:
    """
    Relay client for this request.

    Raises:
        PrintNodeConfigError: If PRINTNODE_API_KEY is not set
    """
    return request.app.state.relay_factory()


def get_print_handler(request: Request) -> PrintHandler:
    return PrintHandler(
        renderer=request.app.state.renderer,
        queue=request.app.state.print_queue,
        relay_factory=request.app.state.relay_factory
    )


def get_relay_handler(request: Request) -> RelayHandler:
    return RelayHandler(get_relay_client(request))
