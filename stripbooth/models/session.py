import logging
import shutil
import tempfile
import uuid
from enum import Enum
from typing import List, Optional

from PIL import Image
from pydantic import BaseModel

from stripbooth.services.recorder import Clip
from stripbooth.services.selection import Selection

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    idle = "idle"
    acquiring = "acquiring"
    shooting = "shooting"
    selecting = "selecting"
    exporting = "exporting"
    done = "done"
    failed = "failed"


class ArtifactStatus(str, Enum):
    pending = "pending"
    ready = "ready"
    failed = "failed"
    unavailable = "unavailable"


class SessionContext:
    """Everything one capture session owns.

    Clips live as files in a private temp directory which ``dispose`` removes.
    """

    def __init__(self, shot_count: int, selection_limit: Optional[int] = None):
        self.session_id = uuid.uuid4().hex
        self.shot_count = shot_count
        self.phase = SessionPhase.idle
        self.stills: List[Image.Image] = []
        self.clips: List[Clip] = []
        self.selection = Selection(selection_limit)
        self.frame_index = 0
        self.error: Optional[str] = None
        self.workdir = tempfile.mkdtemp(prefix=f"stripbooth-{self.session_id[:8]}-")
        self.disposed = False

    @property
    def progress(self) -> str:
        return f"{len(self.stills)} / {self.shot_count}"

    def selected_stills(self) -> List[Image.Image]:
        return [self.stills[i] for i in self.selection]

    def release_clips(self):
        for clip in self.clips:
            clip.release()
        self.clips = []

    def discard_captures(self):
        self.release_clips()
        self.stills = []
        self.selection.clear()

    def dispose(self):
        if self.disposed:
            return
        self.disposed = True
        self.discard_captures()
        shutil.rmtree(self.workdir, ignore_errors=True)
        logger.debug(f"Disposed session {self.session_id}")


class ExportStatus(BaseModel):
    download_url: Optional[str] = None
    view_url: Optional[str] = None
    qr_data_url: Optional[str] = None
    qr_status: ArtifactStatus = ArtifactStatus.pending
    print_status: ArtifactStatus = ArtifactStatus.pending
    video_view_url: Optional[str] = None
    video_qr_data_url: Optional[str] = None
    video_status: ArtifactStatus = ArtifactStatus.pending


class SessionStatusResponse(BaseModel):
    session_id: Optional[str]
    phase: SessionPhase
    progress: str
    photo_count: int
    shot_count: int
    selected_photos: List[int] = []
    selection_count: int = 0
    selection_limit: int
    can_preview: bool = False
    frame_index: int = 0
    error: Optional[str] = None
    export: Optional[ExportStatus] = None


class UploadRequest(BaseModel):
    dataUrl: str


class UploadResponse(BaseModel):
    viewUrl: Optional[str] = None
    downloadUrl: Optional[str] = None
    qrDataUrl: Optional[str] = None
    printUrl: Optional[str] = None
