import asyncio
import logging
import os
from typing import Awaitable, Callable, Optional

from stripbooth.config import settings
from stripbooth.errors import CameraUnavailableError
from stripbooth.models.session import SessionContext, SessionPhase
from stripbooth.services.camera import CameraService
from stripbooth.services.recorder import ClipRecorder
from stripbooth.services.timing import countdown

logger = logging.getLogger(__name__)

Emitter = Callable[[dict], Awaitable[None]]

PERMISSION_MESSAGE = "Camera permission is required to use the photobooth."
FAILURE_MESSAGE = "Capture failed, please try again."


async def _discard(message: dict) -> None:
    return None


class CaptureSessionController:
    """Runs the timed burst: per shot, a countdown while a clip records, then a still."""

    def __init__(self, camera: CameraService, emit: Optional[Emitter] = None,
                 recorder_factory: Callable = ClipRecorder):
        self.camera = camera
        self.emit = emit or _discard
        self.recorder_factory = recorder_factory

    async def _set_phase(self, session: SessionContext, phase: SessionPhase):
        session.phase = phase
        await self.emit({"type": "phase", "session_id": session.session_id, "phase": phase.value})

    async def _tick(self, remaining: int):
        await self.emit({"type": "countdown", "value": remaining})

    async def run(self, session: SessionContext) -> bool:
        """Capture ``session.shot_count`` shots. Returns False when the session aborted.

        The camera is released on every exit, including cancellation.
        """
        session.discard_captures()
        session.frame_index = 0
        session.error = None
        await self._set_phase(session, SessionPhase.acquiring)
        await self.emit({"type": "progress", "completed": 0, "total": session.shot_count,
                         "text": session.progress})

        try:
            try:
                await self.camera.acquire()
            except CameraUnavailableError as e:
                logger.warning(f"Session {session.session_id} aborted, camera unavailable: {e}")
                await self._abort(session, PERMISSION_MESSAGE)
                return False

            await self._set_phase(session, SessionPhase.shooting)
            for index in range(session.shot_count):
                await self._shoot(session, index)
        except asyncio.CancelledError:
            logger.info(f"Session {session.session_id} cancelled during capture")
            session.discard_captures()
            raise
        except Exception:
            logger.exception(f"Session {session.session_id} aborted mid-capture")
            await self._abort(session, FAILURE_MESSAGE)
            return False
        finally:
            await self.camera.release()

        logger.info(f"Session {session.session_id} captured {len(session.stills)} shots")
        await self._set_phase(session, SessionPhase.selecting)
        return True

    async def _shoot(self, session: SessionContext, index: int):
        recorder = self.recorder_factory(self.camera, index, os.path.join(session.workdir, f"clip-{index}"))
        recorder.start()
        try:
            await countdown(settings.countdown_seconds, self._tick, settings.tick_seconds)
            clip = await recorder.stop()
        except BaseException:
            await recorder.abort()
            raise
        session.clips.append(clip)

        session.stills.append(await self.camera.snapshot())
        logger.info(f"Shot {index + 1}/{session.shot_count}: {clip}")
        await self.emit({"type": "progress", "completed": index + 1, "total": session.shot_count,
                         "text": session.progress})

    async def _abort(self, session: SessionContext, message: str):
        session.discard_captures()
        session.error = message
        await self._set_phase(session, SessionPhase.failed)
        await self.emit({"type": "error", "message": message})
        await self._set_phase(session, SessionPhase.idle)
