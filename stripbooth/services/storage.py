import base64
import binascii
import io
import logging
import os
import uuid
from typing import Tuple

import qrcode

from stripbooth.config import settings

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "video/webm": ".webm",
    "video/mp4": ".mp4",
    "video/x-msvideo": ".avi",
}


def parse_data_url(data_url: str, accepted_prefix: str) -> Tuple[str, bytes]:
    """Split ``data:<mime>;base64,<payload>`` into (mime, bytes).

    Raises ValueError unless the URL starts with ``data:<accepted_prefix>``.
    """
    if not data_url or not data_url.startswith(f"data:{accepted_prefix}") or "," not in data_url:
        raise ValueError("Invalid dataUrl")

    header, payload = data_url.split(",", 1)
    mime_type = header[len("data:"):].split(";", 1)[0]
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError("Invalid dataUrl") from e


class ExportStorage:
    """Writes uploaded strips, prints and videos to disk and builds share QR codes."""

    def __init__(self, exports_dir: str = None, prints_dir: str = None):
        self.exports_dir = exports_dir or settings.exports_dir
        self.prints_dir = prints_dir or settings.prints_dir
        os.makedirs(self.exports_dir, exist_ok=True)
        os.makedirs(self.prints_dir, exist_ok=True)

    def _save(self, directory: str, prefix: str, mime_type: str, data: bytes) -> str:
        filename = f"{prefix}-{uuid.uuid4().hex[:8]}{EXTENSIONS.get(mime_type, '.bin')}"
        with open(os.path.join(directory, filename), 'wb') as f:
            f.write(data)
        return filename

    def save_strip(self, mime_type: str, data: bytes) -> str:
        return self._save(self.exports_dir, "strip", mime_type, data)

    def save_video(self, mime_type: str, data: bytes) -> str:
        return self._save(self.exports_dir, "video", mime_type, data)

    def save_print(self, mime_type: str, data: bytes) -> str:
        filename = self._save(self.prints_dir, "print", mime_type, data)
        logger.info(f"Queued {filename} for printing")
        return filename

    def export_path(self, filename: str) -> str:
        return os.path.join(self.exports_dir, os.path.basename(filename))

    @staticmethod
    def qr_data_url(url: str) -> str:
        qr = qrcode.QRCode(border=1, box_size=8)
        qr.add_data(url)
        qr.make(fit=True)

        buffer = io.BytesIO()
        qr.make_image(fill_color="black", back_color="white").save(buffer)
        return f"data:image/png;base64,{base64.b64encode(buffer.getvalue()).decode('utf-8')}"


storage = ExportStorage()
