"""
PDF rendering for label templates.
Draws a template's elements onto a single page sized to the physical label.
"""

import base64
import io
import re

from PIL import Image
from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from labelprint.label_generation.code_generator import CodeGenerationError, CodeGenerator
from labelprint.logger import get_logger
from labelprint.models.template import (
    BarcodeElement,
    CircleElement,
    ImageElement,
    LineElement,
    QRCodeElement,
    RectangleElement,
    Template,
    TextElement,
    UnknownElement,
)

logger = get_logger(__name__)

DATA_URL_PREFIX = re.compile(r"^data:image/[^;]+;base64,")
BOLD_WEIGHTS = {"bold", "bolder", "600", "700", "800", "900"}
PLACEHOLDER_FILL = colors.HexColor("#ffcccc")
PLACEHOLDER_MIN_MM = 5.0  # Placeholder edge when the element has no usable size
DEFAULT_FONT_SIZE = 10.0


class LabelPDFRenderer:
    """
    Renders label templates to PDF.

    Coordinates in a template are millimeters measured from the label's
    top-left corner, y growing downwards. The designer canvas works at
    PX_PER_MM pixels per millimeter; positions and sizes go through that
    scale and then to PDF points, so the page and its elements share one
    mapping.

    Every element is drawn inside its own graphics state, translated to
    its top-left corner and rotated. In that local frame the element box
    spans x in [0, width] and y in [-height, 0].
    """

    PX_PER_MM = 5
    POINTS_PER_MM = 2.835
    RASTER_DPI = 300  # QR/barcode bitmap resolution

    def __init__(self, code_generator: CodeGenerator | None = None):
        self.code_generator = code_generator or CodeGenerator()

    @classmethod
    def to_points(cls, mm: float) -> float:
        """Convert a designer length in mm to PDF points."""
        px = mm * cls.PX_PER_MM
        return px * cls.POINTS_PER_MM / cls.PX_PER_MM

    @classmethod
    def page_size(cls, template: Template) -> tuple[float, float]:
        """Page size in points for a template."""
        return cls.to_points(template.width_mm), cls.to_points(template.height_mm)

    def render(self, template: Template) -> bytes:
        """
        Render a template to a single-page PDF.

        Elements are painted in list order. A failure inside one element
        is logged and replaced by a placeholder (codes, images) or left
        out (everything else); it never aborts the page.

        Args:
            template: Label template

        Returns:
            PDF bytes
        """
        buffer = io.BytesIO()
        page_width, page_height = self.page_size(template)
        c = canvas.Canvas(buffer, pagesize=(page_width, page_height))
        c.setTitle(template.name)

        drawn = 0
        for index, element in enumerate(template.elements):
            if isinstance(element, UnknownElement):
                logger.warning("Unknown element type skipped", extra={
                    "template": template.name,
                    "element_id": element.id,
                    "element_index": index,
                    "element_type": element.type
                })
                continue

            c.saveState()
            try:
                c.translate(self.to_points(element.x), page_height - self.to_points(element.y))
                if element.rotation:
                    c.rotate(-element.rotation)
                self._draw_element(c, element)
                drawn += 1
            except Exception as e:
                logger.error("Element rendering failed", extra={
                    "template": template.name,
                    "element_id": element.id,
                    "element_index": index,
                    "element_type": element.type,
                    "error": str(e)
                })
            finally:
                c.restoreState()

        c.showPage()
        c.save()
        buffer.seek(0)

        logger.info("Label PDF rendered", extra={
            "template": template.name,
            "width_mm": template.width_mm,
            "height_mm": template.height_mm,
            "elements": len(template.elements),
            "drawn": drawn
        })

        return buffer.getvalue()

    def _draw_element(self, c: canvas.Canvas, element):
        """Dispatch on element kind."""
        if isinstance(element, TextElement):
            self._draw_text(c, element)
        elif isinstance(element, QRCodeElement):
            self._draw_qrcode(c, element)
        elif isinstance(element, BarcodeElement):
            self._draw_barcode(c, element)
        elif isinstance(element, ImageElement):
            self._draw_image(c, element)
        elif isinstance(element, RectangleElement):
            self._draw_rectangle(c, element)
        elif isinstance(element, CircleElement):
            self._draw_circle(c, element)
        elif isinstance(element, LineElement):
            self._draw_line(c, element)
        else:
            raise TypeError(f"Unhandled element class: {type(element).__name__}")

    def _draw_text(self, c: canvas.Canvas, el: TextElement):
        font = "Helvetica-Bold" if str(el.font_weight).lower() in BOLD_WEIGHTS else "Helvetica"
        size = el.font_size if el.font_size > 0 else DEFAULT_FONT_SIZE
        width = self.to_points(el.width)
        lines = el.text.split("\n") if el.text else [""]
        leading = size * 1.2

        background = self._color(el.background_color)
        if background is not None and background.rgb() != (1, 1, 1):
            box_height = leading * (len(lines) - 1) + size + 2
            c.setFillColor(background)
            c.rect(0, -box_height, width, box_height, stroke=0, fill=1)

        c.setFillColor(self._color(el.text_color) or colors.black)
        c.setFont(font, size)

        baseline = -pdfmetrics.getAscent(font, size)
        for line in lines:
            if el.text_align == "center":
                c.drawCentredString(width / 2, baseline, line)
            elif el.text_align == "right":
                c.drawRightString(width, baseline, line)
            else:
                c.drawString(0, baseline, line)
            baseline -= leading

    def _draw_qrcode(self, c: canvas.Canvas, el: QRCodeElement):
        size = self._box_points(el.size)
        try:
            if el.size <= 0:
                raise CodeGenerationError(f"QR size must be positive, got {el.size}")
            png = self.code_generator.qr_png(
                el.data,
                size=self._raster_px(el.size),
                fill_color=el.qr_color,
                back_color=el.background_color,
                error_correction=el.error_correction_level
            )
        except Exception as e:
            logger.warning("QR generation failed, drawing placeholder", extra={
                "element_id": el.id,
                "error": str(e)
            })
            self._draw_placeholder(c, size, size, "QR Error")
            return

        c.drawImage(ImageReader(io.BytesIO(png)), 0, -size, size, size)

    def _draw_barcode(self, c: canvas.Canvas, el: BarcodeElement):
        width = self._box_points(el.width)
        height = self._box_points(el.height)
        try:
            if el.width <= 0 or el.height <= 0:
                raise CodeGenerationError(f"Barcode size must be positive, got {el.width}x{el.height}")
            png = self.code_generator.barcode_png(
                el.data,
                symbology=el.barcode_type,
                show_text=el.show_text
            )
        except Exception as e:
            logger.warning("Barcode generation failed, drawing placeholder", extra={
                "element_id": el.id,
                "barcode_type": el.barcode_type,
                "error": str(e)
            })
            self._draw_placeholder(c, width, height, "Barcode Error")
            return

        c.drawImage(ImageReader(io.BytesIO(png)), 0, -height, width, height)

    def _draw_image(self, c: canvas.Canvas, el: ImageElement):
        if not el.image_data:
            return

        width = self._box_points(el.width)
        height = self._box_points(el.height)
        try:
            if el.width <= 0 or el.height <= 0:
                raise ValueError(f"Image size must be positive, got {el.width}x{el.height}")
            raw = base64.b64decode(DATA_URL_PREFIX.sub("", el.image_data.strip()), validate=True)
            img = Image.open(io.BytesIO(raw))
            img.load()
        except Exception as e:
            logger.warning("Image decoding failed, drawing placeholder", extra={
                "element_id": el.id,
                "error": str(e)
            })
            self._draw_placeholder(c, width, height, "IMG")
            return

        c.drawImage(ImageReader(img), 0, -height, width, height, mask="auto")

    def _draw_rectangle(self, c: canvas.Canvas, el: RectangleElement):
        width = self.to_points(el.width)
        height = self.to_points(el.height)
        fill, stroke = self._apply_paint(c, el.fill_color, el.stroke_color, el.stroke_width)

        if el.corner_radius > 0:
            radius = self.to_points(el.corner_radius)
            c.roundRect(0, -height, width, height, radius, stroke=stroke, fill=fill)
        else:
            c.rect(0, -height, width, height, stroke=stroke, fill=fill)

    def _draw_circle(self, c: canvas.Canvas, el: CircleElement):
        if el.radius <= 0:
            return
        radius = self.to_points(el.radius)
        fill, stroke = self._apply_paint(c, el.fill_color, el.stroke_color, el.stroke_width)
        c.circle(radius, -radius, radius, stroke=stroke, fill=fill)

    def _draw_line(self, c: canvas.Canvas, el: LineElement):
        _, stroke = self._apply_paint(c, None, el.stroke_color, el.stroke_width)
        if stroke:
            c.line(0, 0, self.to_points(el.width), -self.to_points(el.height))

    def _apply_paint(self, c: canvas.Canvas, fill_value, stroke_value, stroke_width) -> tuple[int, int]:
        """Set fill/stroke state. Returns reportlab (fill, stroke) flags."""
        fill = self._color(fill_value)
        stroke = self._color(stroke_value) if stroke_width > 0 else None
        if fill is not None:
            c.setFillColor(fill)
        if stroke is not None:
            c.setStrokeColor(stroke)
            c.setLineWidth(stroke_width)
        return int(fill is not None), int(stroke is not None)

    def _draw_placeholder(self, c: canvas.Canvas, width: float, height: float, label: str):
        """Red-bordered box standing in for content that failed to generate."""
        c.setStrokeColor(colors.red)
        c.setFillColor(PLACEHOLDER_FILL)
        c.setLineWidth(1)
        c.rect(0, -height, width, height, stroke=1, fill=1)

        font_size = max(4.0, min(8.0, height * 0.5))
        c.setFillColor(colors.red)
        c.setFont("Helvetica", font_size)
        c.drawString(2, -font_size - 1, label)

    def _box_points(self, mm: float) -> float:
        """Element edge in points; unusable sizes get the placeholder minimum."""
        return self.to_points(mm if mm > 0 else PLACEHOLDER_MIN_MM)

    def _raster_px(self, mm: float) -> int:
        return max(32, round(mm / 25.4 * self.RASTER_DPI))

    @staticmethod
    def _color(value: str | None):
        """Parse a designer color. None means do not paint."""
        if not value or value.strip().lower() in ("transparent", "none"):
            return None
        try:
            return colors.toColor(value.strip())
        except ValueError:
            logger.warning("Invalid color ignored", extra={"color": value})
            return None
