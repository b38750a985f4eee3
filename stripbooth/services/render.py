"""Strip compositing: cover-fit drawing, frame backgrounds and exports.

Everything here draws onto ``PIL.Image`` canvases in RGB mode. A *source* is
either a decoded still (``PIL.Image``), a raw BGR camera frame (numpy array) or
a live object with a ``current_frame()`` method, which is read on every call.
"""

import base64
import io
import logging
import math
import os
from typing import Dict, Optional, Sequence

import cv2
import numpy as np
from PIL import Image

from stripbooth.config import settings
from stripbooth.models.layout import FRAMES, SLOTS, Frame, Slot

logger = logging.getLogger(__name__)


def to_pil(source) -> Optional[Image.Image]:
    if source is None or isinstance(source, Image.Image):
        return source
    if isinstance(source, np.ndarray):
        return Image.fromarray(cv2.cvtColor(source, cv2.COLOR_BGR2RGB))
    return to_pil(source.current_frame())


def to_bgr(image: Image.Image) -> np.ndarray:
    return cv2.cvtColor(np.asarray(image.convert("RGB")), cv2.COLOR_RGB2BGR)


def draw_cover(canvas: Image.Image, source, slot: Slot) -> None:
    """Scale ``source`` to cover ``slot`` keeping its aspect ratio, centred and
    clipped to the slot. A live source with no decoded frame yet draws nothing.
    """
    live = not isinstance(source, Image.Image)
    image = to_pil(source)
    if image is None:
        return

    src_w, src_h = image.size
    src_ratio = src_w / src_h
    box_ratio = slot.w / slot.h

    if src_ratio > box_ratio:
        draw_w, draw_h = slot.h * src_ratio, float(slot.h)
        offset_x, offset_y = (slot.w - draw_w) / 2, 0.0
    else:
        draw_w, draw_h = float(slot.w), slot.w / src_ratio
        offset_x, offset_y = 0.0, (slot.h - draw_h) / 2

    size = (max(math.ceil(draw_w), slot.w), max(math.ceil(draw_h), slot.h))
    resample = Image.Resampling.BILINEAR if live else Image.Resampling.LANCZOS
    scaled = image.convert("RGB").resize(size, resample)

    left = min(max(int(round(-offset_x)), 0), size[0] - slot.w)
    top = min(max(int(round(-offset_y)), 0), size[1] - slot.h)
    canvas.paste(scaled.crop((left, top, left + slot.w, top + slot.h)), (slot.x, slot.y))


def render_composite(canvas: Image.Image, background: Image.Image, sources: Sequence) -> Image.Image:
    canvas.paste((0, 0, 0), (0, 0, canvas.width, canvas.height))
    if background.size != canvas.size:
        background = background.resize(canvas.size, Image.Resampling.LANCZOS)
    canvas.paste(background, (0, 0))

    for source, slot in zip(sources, SLOTS):
        draw_cover(canvas, source, slot)
    return canvas


def new_canvas() -> Image.Image:
    return Image.new("RGB", (settings.frame_width, settings.frame_height), "black")


def render_double(single: Image.Image) -> Image.Image:
    """Two copies of the strip side by side, for 4x6 prints."""
    double = Image.new("RGB", (single.width * 2, single.height), "white")
    double.paste(single, (0, 0))
    double.paste(single, (single.width, 0))
    return double


def flash_slot(canvas: Image.Image, slot: Slot, opacity: float = 1.0) -> None:
    region = canvas.crop(slot.box)
    white = Image.new("RGB", region.size, "white")
    canvas.paste(Image.blend(region, white, opacity), (slot.x, slot.y))


class FrameLibrary:
    """Decoded frame backgrounds, loaded on first use and kept for the process."""

    def __init__(self, frames_dir: str = None, size=None):
        self.frames_dir = frames_dir or settings.frames_dir
        self.size = size or (settings.frame_width, settings.frame_height)
        self._cache: Dict[str, Image.Image] = {}

    def get(self, frame: Frame) -> Image.Image:
        if frame.src in self._cache:
            return self._cache[frame.src]

        path = os.path.join(self.frames_dir, frame.src)
        if os.path.exists(path):
            with Image.open(path) as raw:
                raw = raw.convert("RGBA").resize(self.size, Image.Resampling.LANCZOS)
                background = Image.new("RGB", self.size, "white")
                background.paste(raw, (0, 0), raw)
        else:
            logger.warning(f"Frame background {path} missing, using plain {frame.fill}")
            background = Image.new("RGB", self.size, frame.fill)

        self._cache[frame.src] = background
        return background

    def __len__(self):
        return len(self._cache)


def frame_at(index: int) -> Frame:
    if 0 <= index < len(FRAMES):
        return FRAMES[index]
    return FRAMES[0]


def encode_image(image: Image.Image, fmt: str = "PNG", quality: int = 95) -> bytes:
    buffer = io.BytesIO()
    if fmt == "JPEG":
        image.convert("RGB").save(buffer, format=fmt, quality=quality)
    else:
        image.save(buffer, format=fmt)
    return buffer.getvalue()


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('utf-8')}"
