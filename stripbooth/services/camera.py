import asyncio
import base64
import logging
from typing import Callable, Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from stripbooth.config import settings
from stripbooth.errors import CameraUnavailableError
from stripbooth.services.render import to_pil

logger = logging.getLogger(__name__)


class CameraService:
    """Owns the webcam for the length of one capture session.

    Frames are BGR numpy arrays, mirrored when ``settings.mirror`` is set. The
    most recent frame is kept in ``latest_frame`` for the live preview.
    """

    def __init__(self, capture_factory: Callable = cv2.VideoCapture):
        self.capture_factory = capture_factory
        self.camera = None
        self.is_active = False
        self.latest_frame: Optional[np.ndarray] = None
        self._read_lock = asyncio.Lock()
        self._pending: Optional[asyncio.Future] = None

    async def acquire(self) -> Tuple[int, int]:
        """Open the camera and wait for its first frame. Returns (width, height)."""
        if self.is_active:
            return self.frame_size

        try:
            self.camera = self.capture_factory(settings.camera_index)
            if not self.camera.isOpened():
                raise CameraUnavailableError("Could not open camera")

            self.camera.set(cv2.CAP_PROP_FRAME_WIDTH, settings.camera_width)
            self.camera.set(cv2.CAP_PROP_FRAME_HEIGHT, settings.camera_height)
            self.camera.set(cv2.CAP_PROP_FPS, settings.camera_fps)
            self.is_active = True

            await self.read()
        except CameraUnavailableError:
            await self.release()
            raise
        except Exception as e:
            await self.release()
            raise CameraUnavailableError(f"Camera initialization failed: {e}") from e

        width, height = self.frame_size
        logger.info(f"Camera {settings.camera_index} ready at {width}x{height}")
        return width, height

    @property
    def frame_size(self) -> Tuple[int, int]:
        if self.latest_frame is None:
            return 0, 0
        height, width = self.latest_frame.shape[:2]
        return width, height

    async def read(self) -> np.ndarray:
        if not self.is_active or self.camera is None:
            raise CameraUnavailableError("Camera not available")

        async with self._read_lock:
            await self._settle()
            if self.camera is None:
                raise CameraUnavailableError("Camera not available")
            # shielded so a cancelled caller leaves the worker read tracked in _pending
            self._pending = asyncio.ensure_future(asyncio.to_thread(self.camera.read))
            ret, frame = await asyncio.shield(self._pending)
        if not ret or frame is None:
            raise CameraUnavailableError("Failed to read camera frame")

        if settings.mirror:
            frame = cv2.flip(frame, 1)
        self.latest_frame = frame
        return frame

    async def snapshot(self) -> Image.Image:
        """A full-resolution still of the current frame."""
        return to_pil(await self.read())

    def get_preview_frame(self) -> Optional[str]:
        if not self.is_active or self.latest_frame is None:
            return None

        frame = self.latest_frame
        height, width = frame.shape[:2]
        preview_height = int(height * settings.preview_width / width)
        frame = cv2.resize(frame, (settings.preview_width, preview_height))

        _, buffer = cv2.imencode('.jpg', frame, [cv2.IMWRITE_JPEG_QUALITY, settings.preview_quality])
        return base64.b64encode(buffer).decode('utf-8')

    async def _settle(self):
        pending = self._pending
        if pending is None:
            return
        if not pending.done():
            await asyncio.wait([pending])
        if not pending.cancelled():
            pending.exception()
        self._pending = None

    async def release(self):
        """Release the device once any read still running in a worker thread has returned."""
        await self._settle()
        if self.camera is not None:
            self.camera.release()
            logger.info("Camera released")
        self.camera = None
        self.is_active = False
        self.latest_frame = None
