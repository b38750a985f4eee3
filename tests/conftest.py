import os
import time

import numpy as np
import pytest
from PIL import Image

from stripbooth.config import settings
from stripbooth.models.session import UploadResponse
from stripbooth.services.recorder import Clip, EncodedVideo


@pytest.fixture
def fast_settings(monkeypatch):
    """Shrink every delay so sessions and reconstructions finish in well under a second."""
    values = {
        "countdown_seconds": 2,
        "tick_seconds": 0.01,
        "lead_in_seconds": 0.01,
        "clip_phase_seconds": 0.05,
        "flash_seconds": 0.01,
        "settle_seconds": 0.02,
        "final_hold_seconds": 0.02,
        "refresh_hz": 200,
        "encode_fps": 30,
        "camera_fps": 30,
        "mirror": False,
        "codec_preferences": ["mp4v", "MJPG"],
    }
    for key, value in values.items():
        monkeypatch.setattr(settings, key, value)
    return settings


class FakeCapture:
    """Stands in for cv2.VideoCapture: solid frames whose colour changes every read."""

    def __init__(self, index=0, opened=True, size=(64, 48), fail_after=None):
        self.index = index
        self.opened = opened
        self.size = size
        self.fail_after = fail_after
        self.reads = 0
        self.release_calls = 0
        self.props = {}

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        return self.props.get(prop, 0)

    def read(self):
        if not self.opened or (self.fail_after is not None and self.reads >= self.fail_after):
            return False, None
        self.reads += 1
        width, height = self.size
        frame = np.zeros((height, width, 3), dtype=np.uint8)
        frame[:] = ((self.reads * 40) % 256, (self.reads * 70) % 256, (self.reads * 110) % 256)
        return True, frame

    def release(self):
        self.release_calls += 1
        self.opened = False


class CaptureFactory:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.instances = []

    def __call__(self, index):
        capture = FakeCapture(index, **self.kwargs)
        self.instances.append(capture)
        return capture


class FakeRecorder:
    """Clip recorder that writes a placeholder file instead of encoding video."""

    instances = []

    def __init__(self, camera, index, path_base):
        self.camera = camera
        self.index = index
        self.path = path_base + ".mp4"
        self.started = False
        self.aborted = False
        FakeRecorder.instances.append(self)

    def start(self):
        self.started = True

    async def stop(self):
        with open(self.path, "wb") as f:
            f.write(b"clip")
        return Clip(self.index, self.path, "video/mp4", 1, 30)

    async def abort(self):
        self.aborted = True


@pytest.fixture
def fake_recorder():
    FakeRecorder.instances = []
    return FakeRecorder


class FakeUploader:
    def __init__(self, fail=(), missing=()):
        self.fail = set(fail)
        self.missing = set(missing)
        self.calls = []

    async def _respond(self, kind, data_url):
        self.calls.append((kind, data_url[:22]))
        if kind in self.fail:
            raise RuntimeError(f"{kind} upload exploded")
        if kind in self.missing:
            return UploadResponse()
        return UploadResponse(viewUrl=f"http://booth/view/{kind}", downloadUrl=f"http://booth/exports/{kind}",
                              qrDataUrl=f"data:image/png;base64,{kind}")

    async def upload_strip(self, data_url):
        return await self._respond("strip", data_url)

    async def upload_print(self, data_url):
        return await self._respond("print", data_url)

    async def upload_video(self, data_url):
        return await self._respond("video", data_url)


class FakeEngine:
    def __init__(self, fail=False):
        self.fail = fail
        self.sessions = []

    async def reconstruct(self, session):
        self.sessions.append(session)
        if self.fail:
            raise RuntimeError("encoder gone")
        session.release_clips()
        return EncodedVideo(data=b"webm", mime_type="video/webm", frame_count=1)


class EventLog:
    def __init__(self):
        self.events = []

    async def __call__(self, message):
        self.events.append(message)

    def of_type(self, kind):
        return [event for event in self.events if event["type"] == kind]


@pytest.fixture
def events():
    return EventLog()


def solid(color, size=(160, 120)):
    return Image.new("RGB", size, color)


@pytest.fixture
def frames_dir(tmp_path):
    directory = tmp_path / "frames"
    directory.mkdir()
    Image.new("RGBA", (300, 900), (250, 240, 230, 255)).save(os.path.join(directory, "UBC.png"))
    return str(directory)


class SlowCapture(FakeCapture):
    """A capture whose reads block the worker thread, recording any release that lands mid-read."""

    def __init__(self, index=0, delay=0.2, **kwargs):
        super().__init__(index, **kwargs)
        self.delay = delay
        self.slow = False
        self.reading = False
        self.released_mid_read = False

    def read(self):
        if not self.slow:
            return super().read()
        self.reading = True
        try:
            time.sleep(self.delay)
            return super().read()
        finally:
            self.reading = False

    def release(self):
        self.released_mid_read = self.released_mid_read or self.reading
        super().release()
