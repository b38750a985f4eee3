"""Video recording from the live camera and from compositing canvases.

Encoders are chosen by probing ``settings.codec_preferences`` in order; the
first FourCC that yields an open ``cv2.VideoWriter`` wins.
"""

import asyncio
import logging
import os
from typing import Callable, Optional, Tuple

import cv2
from PIL import Image
from pydantic import BaseModel

from stripbooth.config import settings
from stripbooth.errors import RecorderError
from stripbooth.services.render import to_bgr

logger = logging.getLogger(__name__)

CONTAINERS = {
    "VP90": (".webm", "video/webm"),
    "VP80": (".webm", "video/webm"),
    "mp4v": (".mp4", "video/mp4"),
    "avc1": (".mp4", "video/mp4"),
    "MJPG": (".avi", "video/x-msvideo"),
}


class EncodedVideo(BaseModel):
    data: bytes
    mime_type: str
    frame_count: int


def open_writer(path_base: str, fps: float, size: Tuple[int, int],
                writer_factory: Callable = cv2.VideoWriter):
    """Return ``(writer, path, mime_type)`` for the first codec that opens."""
    for fourcc in settings.codec_preferences:
        extension, mime_type = CONTAINERS.get(fourcc, (".avi", "video/x-msvideo"))
        path = path_base + extension
        writer = writer_factory(path, cv2.VideoWriter_fourcc(*fourcc), fps, size)
        if writer.isOpened():
            logger.debug(f"Recording {path} with {fourcc}")
            return writer, path, mime_type

        logger.debug(f"Codec {fourcc} unavailable, trying next")
        writer.release()
        if os.path.exists(path):
            os.remove(path)

    raise RecorderError(f"No usable video codec among {settings.codec_preferences}")


class Clip:
    """One recorded countdown, paired with the still of the same index."""

    def __init__(self, index: int, path: str, mime_type: str, frame_count: int, fps: float):
        self.index = index
        self.path = path
        self.mime_type = mime_type
        self.frame_count = frame_count
        self.fps = fps
        self.released = False

    def release(self):
        if self.released:
            return
        self.released = True
        if os.path.exists(self.path):
            os.remove(self.path)

    def __repr__(self):
        return f"Clip(index={self.index}, frames={self.frame_count}, released={self.released})"


class _PacedRecorder:
    """Writes ``grab()`` to a video writer at a fixed rate until stopped.

    Frames are written on the loop clock; when a write runs late the current
    frame is repeated so the output keeps wall-clock duration.
    """

    def __init__(self, path_base: str, fps: float, writer_factory: Callable = cv2.VideoWriter):
        self.path_base = path_base
        self.fps = fps
        self.writer_factory = writer_factory
        self.writer = None
        self.path: Optional[str] = None
        self.mime_type: Optional[str] = None
        self.frame_count = 0
        self._stopping = False
        self._task: Optional[asyncio.Task] = None

    async def grab(self):
        raise NotImplementedError

    def _open(self, size: Tuple[int, int]):
        self.writer, self.path, self.mime_type = open_writer(self.path_base, self.fps, size, self.writer_factory)

    def start(self):
        self._stopping = False
        self._task = asyncio.create_task(self._record())

    async def _record(self):
        loop = asyncio.get_running_loop()
        started = loop.time()
        interval = 1 / self.fps

        while not self._stopping:
            frame = await self.grab()
            due = int((loop.time() - started) * self.fps) + 1
            for _ in range(max(due - self.frame_count, 1)):
                self.writer.write(frame)
                self.frame_count += 1
            next_at = started + self.frame_count * interval
            await asyncio.sleep(max(next_at - loop.time(), 0))

    async def _finish(self):
        self._stopping = True
        try:
            if self._task is not None:
                await self._task
        finally:
            self._task = None
            if self.writer is not None:
                self.writer.release()
                self.writer = None

    async def abort(self):
        """Stop without producing output and delete whatever was written."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Recorder failed while aborting")
            self._task = None
        if self.writer is not None:
            self.writer.release()
            self.writer = None
        if self.path and os.path.exists(self.path):
            os.remove(self.path)


class ClipRecorder(_PacedRecorder):
    def __init__(self, camera, index: int, path_base: str, fps: Optional[float] = None,
                 writer_factory: Callable = cv2.VideoWriter):
        super().__init__(path_base, settings.camera_fps if fps is None else fps, writer_factory)
        self.camera = camera
        self.index = index

    async def grab(self):
        return await self.camera.read()

    def start(self):
        self._open(self.camera.frame_size)
        super().start()

    async def stop(self) -> Clip:
        try:
            await self._finish()
        except Exception as e:
            raise RecorderError(f"Clip {self.index} recording failed: {e}") from e
        return Clip(self.index, self.path, self.mime_type, self.frame_count, self.fps)


class CanvasRecorder(_PacedRecorder):
    """Captures a compositing canvas as it is redrawn."""

    def __init__(self, canvas: Image.Image, path_base: str, fps: Optional[float] = None,
                 writer_factory: Callable = cv2.VideoWriter):
        super().__init__(path_base, settings.encode_fps if fps is None else fps, writer_factory)
        self.canvas = canvas

    async def grab(self):
        return to_bgr(self.canvas)

    def start(self):
        self._open(self.canvas.size)
        super().start()

    async def stop(self) -> EncodedVideo:
        try:
            await self._finish()
        except Exception as e:
            raise RecorderError(f"Canvas recording failed: {e}") from e

        try:
            with open(self.path, "rb") as f:
                data = f.read()
        finally:
            os.remove(self.path)
        return EncodedVideo(data=data, mime_type=self.mime_type, frame_count=self.frame_count)
