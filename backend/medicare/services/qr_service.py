"""
QR codec for worker identifiers.

Encoding uses the qrcode library at error-correction level H so printed
cards survive wear; decoding uses OpenCV's QR detector on still images or
video frames.
"""

import html
import io
import logging
import os
from typing import Optional, Union

import cv2
import numpy as np
import qrcode
from qrcode.constants import ERROR_CORRECT_H
from qrcode.image.svg import SvgPathImage
from PIL import Image

from medicare.config import get_settings
from medicare.exceptions import DecodeFailure

logger = logging.getLogger(__name__)

QR_BORDER = 4
# Symbols smaller than this are upscaled before a second decode attempt
MIN_DECODE_SIDE = 300

ImageSource = Union[bytes, bytearray, str, os.PathLike, Image.Image, np.ndarray]


class QRService:
    def __init__(self):
        self.settings = get_settings()

    # Encoding

    def _build(self, identifier: str) -> qrcode.QRCode:
        if not identifier:
            raise ValueError("identifier must be a non-empty string")
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_H,
            box_size=10,
            border=QR_BORDER,
        )
        qr.add_data(identifier)
        qr.make(fit=True)
        return qr

    def encode_image(
        self,
        identifier: str,
        size: Optional[int] = None,
        fill_color: Optional[str] = None,
        back_color: Optional[str] = None,
    ) -> Image.Image:
        """Render the identifier as a square RGB image of `size` pixels."""
        size = size or self.settings.qr_default_size
        qr = self._build(identifier)
        total_modules = qr.modules_count + 2 * QR_BORDER
        qr.box_size = max(1, round(size / total_modules))

        img = qr.make_image(
            fill_color=fill_color or self.settings.qr_fill_color,
            back_color=back_color or self.settings.qr_back_color,
        ).get_image().convert("RGB")
        if img.size != (size, size):
            img = img.resize((size, size), Image.NEAREST)
        return img

    def encode_png(self, identifier: str, size: Optional[int] = None, **colors) -> bytes:
        buf = io.BytesIO()
        self.encode_image(identifier, size=size, **colors).save(buf, format="PNG")
        return buf.getvalue()

    def encode_svg(self, identifier: str, size: Optional[int] = None, fill_color: Optional[str] = None) -> str:
        """Render the identifier as standalone SVG markup sized in pixels."""
        size = size or self.settings.qr_default_size
        qr = self._build(identifier)
        svg_img = qr.make_image(image_factory=SvgPathImage)
        root = svg_img.get_image()

        if root.get("viewBox") is None:
            width = root.get("width", "").replace("mm", "")
            height = root.get("height", "").replace("mm", "")
            root.set("viewBox", f"0 0 {width} {height}")
        root.set("width", str(size))
        root.set("height", str(size))

        fill = fill_color or self.settings.qr_fill_color
        for element in root.iter():
            if element.tag.endswith("path"):
                element.set("fill", fill)

        return svg_img.to_string(encoding="unicode")

    def render_print_document(self, identifier: str, display_name: str, size: Optional[int] = None) -> str:
        """Printable HTML card: display name, caption, raw SVG symbol and identifier."""
        svg_markup = self.encode_svg(identifier, size=size)
        title = html.escape(identifier)
        name = html.escape(display_name)
        return f"""<!DOCTYPE html>
<html>
  <head>
    <title>QR Code - {title}</title>
    <style>
      body {{
        display: flex;
        flex-direction: column;
        align-items: center;
        justify-content: center;
        min-height: 100vh;
        margin: 0;
        font-family: Arial, sans-serif;
      }}
      .container {{
        text-align: center;
        padding: 40px;
        border: 2px solid #eee;
        border-radius: 16px;
      }}
      h1 {{ font-size: 24px; margin-bottom: 8px; }}
      p {{ color: #666; margin-bottom: 24px; }}
      .qr-code {{ margin: 24px 0; }}
      .worker-id {{
        font-family: monospace;
        font-size: 18px;
        background: #f5f5f5;
        padding: 8px 16px;
        border-radius: 8px;
        display: inline-block;
      }}
    </style>
  </head>
  <body onload="window.print()">
    <div class="container">
      <h1>{name}</h1>
      <p>Digital Health Record</p>
      <div class="qr-code">{svg_markup}</div>
      <div class="worker-id">{title}</div>
    </div>
  </body>
</html>
"""

    @staticmethod
    def download_filename(identifier: str) -> str:
        return f"{identifier}-qr-code.png"

    # Decoding

    @staticmethod
    def load_image(source: ImageSource) -> np.ndarray:
        """Load any supported image source as a BGR (or grayscale) array."""
        if isinstance(source, np.ndarray):
            return source
        if isinstance(source, Image.Image):
            return cv2.cvtColor(np.array(source.convert("RGB")), cv2.COLOR_RGB2BGR)
        if isinstance(source, (str, os.PathLike)):
            with open(source, "rb") as f:
                source = f.read()
        elif hasattr(source, "read"):
            source = source.read()

        if not isinstance(source, (bytes, bytearray)) or not source:
            raise DecodeFailure("Empty or unsupported image input")

        arr = cv2.imdecode(np.frombuffer(bytes(source), dtype=np.uint8), cv2.IMREAD_COLOR)
        if arr is not None:
            return arr

        # Formats OpenCV cannot read (e.g. some GIF/WebP builds) go through Pillow
        try:
            with Image.open(io.BytesIO(bytes(source))) as img:
                return cv2.cvtColor(np.array(img.convert("RGB")), cv2.COLOR_RGB2BGR)
        except (OSError, ValueError) as e:
            raise DecodeFailure(f"Could not read image: {e}") from e

    def decode_image(self, source: ImageSource) -> str:
        """Return the identifier encoded in the image, or raise DecodeFailure."""
        frame = self.load_image(source)
        detector = cv2.QRCodeDetector()

        text = self._detect(detector, frame)
        if not text:
            height, width = frame.shape[:2]
            if min(height, width) < MIN_DECODE_SIDE:
                scale = MIN_DECODE_SIDE / float(min(height, width))
                enlarged = cv2.resize(frame, None, fx=scale, fy=scale, interpolation=cv2.INTER_NEAREST)
                text = self._detect(detector, enlarged)
        if not text:
            raise DecodeFailure()
        return text

    @staticmethod
    def _detect(detector, frame: np.ndarray) -> str:
        try:
            text, _points, _ = detector.detectAndDecode(frame)
        except cv2.error as e:
            logger.debug("QR detection error: %s", e)
            return ""
        return text or ""


qr_service = QRService()
