"""
Pydantic models for print requests, print options and the batch queue.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from labelprint.models.template import Template


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PrintOptions(_CamelModel):
    """Options forwarded to the print relay with a job."""

    title: str | None = None
    source: str | None = None
    copies: int | None = Field(None, ge=1)
    duplex: str | None = Field(None, description="long-edge, short-edge or one-sided")
    orientation: str | None = Field(None, description="portrait or landscape")
    media: str | None = None
    dpi: str | None = None
    fit_to_page: bool | None = None
    page_range: str | None = None
    expire_after: int | None = Field(None, ge=0, description="Seconds before the relay drops the job")
    qty: int | None = Field(None, ge=1)
    authentication: dict[str, Any] | None = None

    def group_key(self) -> str:
        """Stable key for grouping entries that share the same options."""
        return self.model_dump_json(exclude_none=True)


class QueueEntry(_CamelModel):
    """One pending print request in the batch queue."""

    template: Template
    printer_id: int
    print_options: PrintOptions = Field(default_factory=PrintOptions)


class PrintRequest(_CamelModel):
    """Body of POST /api/print."""

    template: Template
    printer_id: int
    print_options: PrintOptions = Field(default_factory=PrintOptions)
    use_queue: bool = False


class PrintResponse(_CamelModel):
    """Result of POST /api/print."""

    success: bool
    message: str
    job_id: int | None = None
    queue_size: int | None = None


class QueueStatus(_CamelModel):
    """Snapshot of the batch queue."""

    queue_size: int
    is_processing: bool


class QueueClearResponse(_CamelModel):
    success: bool = True
    message: str
    cleared: int
