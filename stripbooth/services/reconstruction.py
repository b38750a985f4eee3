"""Highlight video: replays each selected clip into its slot of the strip.

For every slot in ascending capture order the live clip plays for a fixed
wall-clock window, the slot flashes, then freezes on its still. The canvas is
sampled by a ``CanvasRecorder`` the whole time, so the encoded video shows the
strip filling in at real speed.
"""

import asyncio
import logging
import os
from typing import Callable, Optional

import cv2

from stripbooth.config import settings
from stripbooth.errors import RecorderError
from stripbooth.models.layout import SLOTS
from stripbooth.models.session import SessionContext
from stripbooth.services.recorder import CanvasRecorder, Clip, EncodedVideo
from stripbooth.services.render import FrameLibrary, flash_slot, frame_at, new_canvas, render_composite
from stripbooth.services.timing import run_for, wait

logger = logging.getLogger(__name__)


class ClipPlayer:
    """Plays a recorded clip against the loop clock.

    ``current_frame`` decodes forward to the frame due at the current playback
    time. Once the clip runs out the last frame stays on screen.
    """

    def __init__(self, clip: Clip, capture_factory: Callable = cv2.VideoCapture):
        self.clip = clip
        self.capture_factory = capture_factory
        self.capture = None
        self.fps = clip.fps
        self.position = 0
        self.ended = False
        self._frame = None
        self._started: Optional[float] = None

    def load(self):
        self.capture = self.capture_factory(self.clip.path)
        if not self.capture.isOpened():
            raise RecorderError(f"Cannot open clip {self.clip.path}")

        fps = self.capture.get(cv2.CAP_PROP_FPS)
        if fps and fps > 0:
            self.fps = fps
        ret, frame = self.capture.read()
        if not ret:
            raise RecorderError(f"Clip {self.clip.index} has no frames")
        self._frame = frame
        self.position = 1

    def play(self):
        self._started = asyncio.get_running_loop().time()

    def current_frame(self):
        if self._started is None or self.ended:
            return self._frame

        elapsed = asyncio.get_running_loop().time() - self._started
        due = int(elapsed * self.fps) + 1
        while self.position < due:
            ret, frame = self.capture.read()
            if not ret:
                self.ended = True
                break
            self._frame = frame
            self.position += 1
        return self._frame

    def release(self):
        if self.capture is not None:
            self.capture.release()
            self.capture = None


class VideoReconstructionEngine:
    def __init__(self, library: FrameLibrary,
                 on_transition: Optional[Callable[[str, int], None]] = None,
                 player_factory: Callable = ClipPlayer,
                 recorder_factory: Callable = CanvasRecorder):
        self.library = library
        self.on_transition = on_transition
        self.player_factory = player_factory
        self.recorder_factory = recorder_factory

    def _transition(self, kind: str, position: int):
        if self.on_transition is not None:
            self.on_transition(kind, position)

    async def reconstruct(self, session: SessionContext) -> EncodedVideo:
        """Encode the strip filling in. Releases every clip of the session when done."""
        indices = session.selection.ordered()[:len(SLOTS)]
        try:
            clips = [session.clips[i] for i in indices]
        except IndexError:
            session.release_clips()
            raise RecorderError(f"Missing clips for selection {indices}")

        frozen = [session.stills[i] for i in indices]
        background = self.library.get(frame_at(session.frame_index))
        canvas = render_composite(new_canvas(), background, [])

        logger.info(f"Reconstructing highlight video for stills {indices}")
        recorder = self.recorder_factory(canvas, os.path.join(session.workdir, "highlight"))
        recorder.start()
        try:
            await wait(settings.lead_in_seconds)
            for position, clip in enumerate(clips):
                await self._play_slot(canvas, background, frozen, position, clip)

            await wait(settings.final_hold_seconds)
            video = await recorder.stop()
        except BaseException:
            await recorder.abort()
            raise
        finally:
            session.release_clips()

        logger.info(f"Highlight video ready: {video.frame_count} frames, {len(video.data)} bytes")
        return video

    async def _play_slot(self, canvas, background, frozen, position: int, clip: Clip):
        slot = SLOTS[position]
        player = self.player_factory(clip)
        try:
            player.load()
            player.play()
            live = frozen[:position] + [player]
            await run_for(settings.clip_phase_seconds,
                          lambda: render_composite(canvas, background, live),
                          1 / settings.refresh_hz)
        finally:
            player.release()

        flash_slot(canvas, slot, settings.flash_opacity)
        self._transition("flash", position)
        await wait(settings.flash_seconds)

        render_composite(canvas, background, frozen[:position + 1])
        self._transition("freeze", position)
        await wait(settings.settle_seconds)
