"""
Printing package: PrintNode relay client and the debounced batch queue.
"""

from labelprint.printing.dispatch_queue import PrintDispatchQueue
from labelprint.printing.printnode_client import (
    PrintNodeAPIError,
    PrintNodeClient,
    PrintNodeConfigError,
    PrintNodeError,
    get_printnode_client,
)
from labelprint.printing.scheduler import Scheduler, ThreadingScheduler

__all__ = [
    "PrintDispatchQueue",
    "PrintNodeAPIError",
    "PrintNodeClient",
    "PrintNodeConfigError",
    "PrintNodeError",
    "get_printnode_client",
    "Scheduler",
    "ThreadingScheduler",
]
