"""
Pydantic models for label templates.

A template is the document the browser designer produces: a physical label
size in millimeters plus an ordered list of elements. Paint order is list
order, so later elements sit on top of earlier ones.

Field names are snake_case in Python and camelCase on the wire
(``widthMm``, ``fontSize``, ``imageData``...). Unknown keys sent by the
designer are kept so a saved template reloads unchanged.

Element fields are deliberately loose: the designer sends whatever its
property panel holds (a cleared size field arrives as 0, a QR payload may
arrive as a number). Out-of-range values are left for the renderer to
handle, and an element that still fails validation becomes an
UnknownElement, so one broken element never rejects the whole label.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationError,
    ValidatorFunctionWrapHandler,
    WrapValidator,
    field_validator,
)
from pydantic.alias_generators import to_camel

from labelprint.logger import get_logger

logger = get_logger(__name__)


class _WireModel(BaseModel):
    """camelCase aliases, extra keys preserved."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )


class BaseElement(_WireModel):
    """Fields shared by every element kind. Coordinates are in mm."""

    id: str | None = None
    x: float = 0.0
    y: float = 0.0
    rotation: float = Field(0.0, description="Degrees clockwise around the top-left corner")


class TextElement(BaseElement):
    type: Literal["text"] = "text"
    text: str = ""
    font_size: float = Field(10.0, description="Font size in points; <= 0 falls back to the default")
    font_weight: str = "normal"
    text_color: str = "#000000"
    background_color: str = "#ffffff"
    text_align: str = Field("left", description="left, center or right; anything else is left")
    width: float = 50.0

    @field_validator("text", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class QRCodeElement(BaseElement):
    type: Literal["qrcode"] = "qrcode"
    data: str = ""
    size: float = 20.0
    qr_color: str = "#000000"
    background_color: str = "#ffffff"
    error_correction_level: str = Field("M", description="L, M, Q or H")

    @field_validator("data", mode="before")
    @classmethod
    def _data_as_text(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class BarcodeElement(BaseElement):
    type: Literal["barcode"] = "barcode"
    data: str = ""
    barcode_type: str = "code128"
    width: float = 50.0
    height: float = 10.0
    show_text: bool = True

    @field_validator("data", mode="before")
    @classmethod
    def _data_as_text(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class ImageElement(BaseElement):
    type: Literal["image"] = "image"
    image_data: str | None = Field(None, description="Base64 payload or data URL")
    width: float = 50.0
    height: float = 50.0


class RectangleElement(BaseElement):
    type: Literal["rectangle"] = "rectangle"
    width: float = 50.0
    height: float = 30.0
    fill_color: str = "#ffffff"
    stroke_color: str = "#000000"
    stroke_width: float = 1.0
    corner_radius: float = 0.0


class CircleElement(BaseElement):
    type: Literal["circle"] = "circle"
    radius: float = 25.0
    fill_color: str = "#ffffff"
    stroke_color: str = "#000000"
    stroke_width: float = 1.0


class LineElement(BaseElement):
    """Line from (x, y) to (x + width, y + height)."""

    type: Literal["line"] = "line"
    width: float = 50.0
    height: float = 0.0
    stroke_color: str = "#000000"
    stroke_width: float = 1.0


class UnknownElement(BaseElement):
    """Element this service cannot draw. Skipped at render."""

    type: str = ""


ELEMENT_TYPES = ("text", "qrcode", "barcode", "image", "rectangle", "circle", "line")


def _element_kind(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
    else:
        kind = getattr(value, "type", None)
    return kind if kind in ELEMENT_TYPES else "unknown"


def _invalid_as_unknown(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    """Validate an element; one that does not validate is kept as UnknownElement."""
    try:
        return handler(value)
    except ValidationError as e:
        raw = value if isinstance(value, dict) else {}
        kind = raw.get("type")
        element_id = raw.get("id")
        logger.warning("Invalid element replaced by unknown element", extra={
            "element_id": element_id,
            "element_type": kind,
            "errors": e.error_count()
        })
        return UnknownElement(
            type=kind if isinstance(kind, str) else "",
            id=element_id if isinstance(element_id, str) else None
        )


Element = Annotated[
    Union[
        Annotated[TextElement, Tag("text")],
        Annotated[QRCodeElement, Tag("qrcode")],
        Annotated[BarcodeElement, Tag("barcode")],
        Annotated[ImageElement, Tag("image")],
        Annotated[RectangleElement, Tag("rectangle")],
        Annotated[CircleElement, Tag("circle")],
        Annotated[LineElement, Tag("line")],
        Annotated[UnknownElement, Tag("unknown")],
    ],
    Discriminator(_element_kind),
    WrapValidator(_invalid_as_unknown),
]


class Template(_WireModel):
    """Label design: physical size plus ordered elements."""

    name: str = "Untitled"
    width_mm: float = Field(..., gt=0)
    height_mm: float = Field(..., gt=0)
    elements: list[Element] = Field(default_factory=list)

    def to_wire(self) -> dict:
        """Serialize with the designer's camelCase field names."""
        return self.model_dump(by_alias=True, mode="json")
