"""The booth's command interface.

UI layers (HTTP routes, the WebSocket page, tests) drive a ``Booth`` through
``start_session``, ``toggle_selection``, ``choose_frame``, ``export_and_upload``
and ``reset``. Capture and export run as background tasks on the event loop;
starting a new session cancels both and disposes the previous session.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from PIL import Image

from stripbooth.config import settings
from stripbooth.errors import SessionStateError
from stripbooth.models.layout import FRAMES
from stripbooth.models.session import ExportStatus, SessionContext, SessionPhase, SessionStatusResponse
from stripbooth.services.camera import CameraService
from stripbooth.services.capture import CaptureSessionController
from stripbooth.services.export import ExportCoordinator
from stripbooth.services.reconstruction import VideoReconstructionEngine
from stripbooth.services.render import FrameLibrary, encode_image, new_canvas, render_composite
from stripbooth.services.uploader import UploadClient
from stripbooth.services.websocket import websocket_manager

logger = logging.getLogger(__name__)


class Booth:
    def __init__(self, camera: CameraService = None, uploader: UploadClient = None,
                 library: FrameLibrary = None, emit: Callable[[dict], Awaitable[None]] = None,
                 engine: VideoReconstructionEngine = None, controller: CaptureSessionController = None):
        self.camera = camera if camera is not None else CameraService()
        self.library = library if library is not None else FrameLibrary()
        self.emit = emit if emit is not None else websocket_manager.broadcast
        if controller is None:
            controller = CaptureSessionController(self.camera, self.emit)
        self.controller = controller
        if engine is None:
            engine = VideoReconstructionEngine(self.library)
        self.exporter = ExportCoordinator(self.library, uploader if uploader is not None else UploadClient(), engine,
                                          on_update=self._export_updated)
        self.session: Optional[SessionContext] = None
        self.export_status: Optional[ExportStatus] = None
        self._capture_task: Optional[asyncio.Task] = None
        self._export_task: Optional[asyncio.Task] = None

    @property
    def capturing(self) -> bool:
        return self._capture_task is not None and not self._capture_task.done()

    def _require_session(self, *phases: SessionPhase) -> SessionContext:
        if self.session is None:
            raise SessionStateError("No active session")
        if phases and self.session.phase not in phases:
            raise SessionStateError(f"Session is {self.session.phase.value}")
        return self.session

    async def _cancel_tasks(self):
        for task in (self._capture_task, self._export_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                except Exception:
                    logger.exception("Background task failed while cancelling")
        self._capture_task = None
        self._export_task = None

    async def start_session(self) -> SessionContext:
        await self._cancel_tasks()
        if self.session is not None:
            self.session.dispose()
        await self.camera.release()

        self.session = SessionContext(settings.shot_count, settings.selection_limit)
        self.export_status = None
        logger.info(f"Starting session {self.session.session_id}")
        self._capture_task = asyncio.create_task(self.controller.run(self.session))
        return self.session

    async def toggle_selection(self, index: int) -> SessionStatusResponse:
        session = self._require_session(SessionPhase.selecting)
        if not 0 <= index < len(session.stills):
            raise IndexError(f"No photo at index {index}")

        session.selection.toggle(index)
        count, limit = session.selection.status()
        await self.emit({"type": "selection", "selected": session.selection.ordered(),
                         "count": count, "limit": limit, "ready": session.selection.ready})
        return self.status()

    async def choose_frame(self, index: int) -> SessionStatusResponse:
        session = self._require_session(SessionPhase.selecting, SessionPhase.done)
        if not 0 <= index < len(FRAMES):
            raise IndexError(f"No frame at index {index}")

        session.frame_index = index
        await self.emit({"type": "frame", "frame_index": index})
        return self.status()

    async def export_and_upload(self) -> SessionStatusResponse:
        session = self._require_session(SessionPhase.selecting, SessionPhase.done)
        if not session.selection.ready:
            raise SessionStateError(f"Select exactly {session.selection.limit} photos first")
        if self._export_task is not None and not self._export_task.done():
            raise SessionStateError("Export already running")

        session.phase = SessionPhase.exporting
        self.export_status = None
        await self.emit({"type": "phase", "session_id": session.session_id, "phase": session.phase.value})
        self._export_task = asyncio.create_task(self._run_export(session))
        return self.status()

    async def _run_export(self, session: SessionContext):
        status = await self.exporter.export(session)
        session.phase = SessionPhase.done
        await self.emit({"type": "phase", "session_id": session.session_id, "phase": session.phase.value})
        logger.info(f"Export finished for {session.session_id}: strip={status.qr_status.value} "
                    f"print={status.print_status.value} video={status.video_status.value}")

    async def _export_updated(self, status: ExportStatus):
        self.export_status = status
        await self.emit({"type": "export", **status.model_dump(mode="json")})

    async def join(self):
        """Wait for any running capture or export task."""
        for task in (self._capture_task, self._export_task):
            if task is not None:
                await task

    def status(self) -> SessionStatusResponse:
        session = self.session
        if session is None:
            return SessionStatusResponse(session_id=None, phase=SessionPhase.idle, progress="",
                                         photo_count=0, shot_count=settings.shot_count,
                                         selection_limit=settings.selection_limit)

        count, limit = session.selection.status()
        return SessionStatusResponse(
            session_id=session.session_id,
            phase=session.phase,
            progress=session.progress,
            photo_count=len(session.stills),
            shot_count=session.shot_count,
            selected_photos=session.selection.ordered(),
            selection_count=count,
            selection_limit=limit,
            can_preview=session.selection.ready,
            frame_index=session.frame_index,
            error=session.error,
            export=self.export_status,
        )

    def still_jpeg(self, index: int) -> bytes:
        session = self._require_session()
        if not 0 <= index < len(session.stills):
            raise IndexError(f"No photo at index {index}")
        still = session.stills[index].copy()
        still.thumbnail((settings.preview_width, settings.preview_width))
        return encode_image(still, "JPEG", settings.thumbnail_quality)

    def preview(self) -> Image.Image:
        return self.exporter.render_preview(self._require_session())

    def frame_option_png(self, index: int) -> bytes:
        session = self._require_session()
        if not 0 <= index < len(FRAMES):
            raise IndexError(f"No frame at index {index}")
        option = render_composite(new_canvas(), self.library.get(FRAMES[index]), session.selected_stills())
        option.thumbnail((settings.frame_width // 3, settings.frame_height // 3))
        return encode_image(option)

    async def reset(self):
        await self._cancel_tasks()
        if self.session is not None:
            self.session.dispose()
        self.session = None
        self.export_status = None
        await self.camera.release()
        await self.emit({"type": "phase", "session_id": None, "phase": SessionPhase.idle.value})

    async def shutdown(self):
        await self.reset()


booth = Booth()
