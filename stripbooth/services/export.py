import asyncio
import logging
from typing import Awaitable, Callable, Optional

from stripbooth.errors import UploadError
from stripbooth.models.session import ArtifactStatus, ExportStatus, SessionContext
from stripbooth.services.reconstruction import VideoReconstructionEngine
from stripbooth.services.render import (FrameLibrary, encode_image, frame_at, new_canvas,
                                        render_composite, render_double, to_data_url)
from stripbooth.services.uploader import UploadClient

logger = logging.getLogger(__name__)


class ExportCoordinator:
    """Renders the final strips and runs the three uploads side by side.

    Each upload updates its own part of ``ExportStatus`` and publishes it as
    soon as it resolves; one failing never holds up the others.
    """

    def __init__(self, library: FrameLibrary, uploader: UploadClient, engine: VideoReconstructionEngine,
                 on_update: Optional[Callable[[ExportStatus], Awaitable[None]]] = None):
        self.library = library
        self.uploader = uploader
        self.engine = engine
        self.on_update = on_update

    async def _publish(self, status: ExportStatus):
        if self.on_update is not None:
            await self.on_update(status)

    def render_preview(self, session: SessionContext):
        background = self.library.get(frame_at(session.frame_index))
        return render_composite(new_canvas(), background, session.selected_stills())

    async def export(self, session: SessionContext) -> ExportStatus:
        single = self.render_preview(session)
        double = render_double(single)
        single_url = to_data_url(encode_image(single), "image/png")
        double_url = to_data_url(encode_image(double), "image/png")

        status = ExportStatus(video_status=ArtifactStatus.pending)
        await self._publish(status)

        await asyncio.gather(
            self._upload_strip(single_url, status),
            self._upload_print(double_url, status),
            self._upload_video(session, status),
        )
        return status

    async def _upload_strip(self, data_url: str, status: ExportStatus):
        try:
            result = await self.uploader.upload_strip(data_url)
            if not result.downloadUrl or not result.qrDataUrl:
                raise UploadError("strip upload response missing downloadUrl or qrDataUrl")
            status.download_url = result.downloadUrl
            status.view_url = result.viewUrl
            status.qr_data_url = result.qrDataUrl
            status.qr_status = ArtifactStatus.ready
        except Exception as e:
            logger.error(f"Strip upload failed: {e}")
            status.qr_status = ArtifactStatus.failed
        await self._publish(status)

    async def _upload_print(self, data_url: str, status: ExportStatus):
        try:
            await self.uploader.upload_print(data_url)
            status.print_status = ArtifactStatus.ready
        except Exception as e:
            logger.error(f"Print upload failed: {e}")
            status.print_status = ArtifactStatus.failed
        await self._publish(status)

    async def _upload_video(self, session: SessionContext, status: ExportStatus):
        try:
            video = await self.engine.reconstruct(session)
            result = await self.uploader.upload_video(to_data_url(video.data, video.mime_type))
            if not result.qrDataUrl:
                raise UploadError("video upload response missing qrDataUrl")
            status.video_view_url = result.viewUrl
            status.video_qr_data_url = result.qrDataUrl
            status.video_status = ArtifactStatus.ready
        except Exception:
            logger.exception("Highlight video failed")
            status.video_status = ArtifactStatus.unavailable
        await self._publish(status)
