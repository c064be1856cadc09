"""
QR code and barcode raster generation for label elements.
"""

import io

import barcode
import qrcode
from barcode.writer import ImageWriter
from PIL import Image
from qrcode.image.pil import PilImage

from labelprint.logger import get_logger

logger = get_logger(__name__)


class CodeGenerationError(Exception):
    """Data could not be encoded in the requested symbology."""
    pass


ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,  # ~7%
    "M": qrcode.constants.ERROR_CORRECT_M,  # ~15%
    "Q": qrcode.constants.ERROR_CORRECT_Q,  # ~25%
    "H": qrcode.constants.ERROR_CORRECT_H,  # ~30%
}

# Designer symbology name -> python-barcode class name
BARCODE_SYMBOLOGIES = {
    "code128": "code128",
    "code39": "code39",
    "ean13": "ean13",
    "ean8": "ean8",
    "upca": "upca",
    "itf": "itf",
    "codabar": "codabar",
}


class CodeGenerator:
    """Generates QR code and barcode PNGs."""

    def qr_png(
        self,
        data: str,
        size: int = 200,
        fill_color: str = "#000000",
        back_color: str = "#ffffff",
        error_correction: str = "M"
    ) -> bytes:
        """
        Generate a square QR code.

        Args:
            data: Text to encode
            size: Output edge length in pixels
            fill_color: Module color
            back_color: Background color
            error_correction: L, M, Q or H

        Returns:
            PNG image bytes

        Raises:
            CodeGenerationError: If data is empty or cannot be encoded
        """
        if not data:
            raise CodeGenerationError("QR data is empty")
        if error_correction not in ERROR_CORRECTION_LEVELS:
            raise CodeGenerationError(f"Unknown error correction level: {error_correction}")

        qr = qrcode.QRCode(
            version=None,  # Auto-determine version
            error_correction=ERROR_CORRECTION_LEVELS[error_correction],
            box_size=10,
            border=0  # Quiet zone is the designer's job
        )

        try:
            qr.add_data(data)
            qr.make(fit=True)
        except qrcode.exceptions.DataOverflowError as e:
            raise CodeGenerationError(f"QR data too long: {len(data)} characters") from e

        img: PilImage = qr.make_image(
            image_factory=PilImage,
            fill_color=fill_color,
            back_color=back_color
        )

        # Nearest keeps module edges sharp
        img = img.convert("RGB").resize((size, size), Image.Resampling.NEAREST)

        return self._to_png(img)

    def barcode_png(
        self,
        data: str,
        symbology: str = "code128",
        show_text: bool = True,
        foreground: str = "black",
        background: str = "white"
    ) -> bytes:
        """
        Generate a linear barcode.

        Args:
            data: Text to encode
            symbology: Designer symbology name (code128, code39, ean13, ...)
            show_text: Print the human-readable text under the bars
            foreground: Bar color
            background: Background color

        Returns:
            PNG image bytes

        Raises:
            CodeGenerationError: If the symbology is unsupported or the data invalid
        """
        if not data:
            raise CodeGenerationError("Barcode data is empty")

        name = BARCODE_SYMBOLOGIES.get(symbology.lower())
        if name is None:
            raise CodeGenerationError(f"Unsupported barcode type: {symbology}")

        barcode_class = barcode.get_barcode_class(name)
        try:
            code = barcode_class(data, writer=ImageWriter())
            img = code.render(writer_options={
                "write_text": show_text,
                "foreground": foreground,
                "background": background,
                "quiet_zone": 1,
            })
        except Exception as e:
            # python-barcode raises a different error class per symbology
            raise CodeGenerationError(f"Cannot encode {data!r} as {symbology}: {e}") from e

        return self._to_png(img)

    @staticmethod
    def _to_png(img: Image.Image) -> bytes:
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer.getvalue()
