from pydantic_settings import BaseSettings
from typing import List, Optional
import os


class Settings(BaseSettings):
    app_name: str = "StripBooth"
    app_description: str = "A webcam photo-strip booth with highlight video and QR sharing"
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = 3000

    camera_index: int = 0
    camera_width: int = 1920
    camera_height: int = 1080
    camera_fps: int = 30
    mirror: bool = True
    preview_width: int = 640
    preview_quality: int = 60
    thumbnail_quality: int = 85

    shot_count: int = 6
    selection_limit: int = 4
    countdown_seconds: int = 2
    tick_seconds: float = 1.0

    frame_width: int = 600
    frame_height: int = 1800

    # highlight video
    encode_fps: int = 30
    refresh_hz: int = 60
    lead_in_seconds: float = 0.3
    clip_phase_seconds: float = 1.2
    flash_seconds: float = 0.1
    flash_opacity: float = 1.0
    settle_seconds: float = 0.5
    final_hold_seconds: float = 0.9

    frames_dir: str = "stripbooth/static/frames"
    exports_dir: str = "stripbooth/static/exports"
    prints_dir: str = "stripbooth/static/prints"
    public_base_url: Optional[str] = None
    upload_base_url: str = "http://127.0.0.1:3000"
    upload_timeout: float = 60.0
    max_upload_bytes: int = 25 * 1024 * 1024

    log_level: str = "INFO"
    log_file: Optional[str] = "logs/stripbooth.log"

    codec_preferences: List[str] = ["VP90", "VP80", "mp4v", "MJPG"]

    class Config:
        env_file = ".env"


settings = Settings()
os.makedirs(settings.exports_dir, exist_ok=True)
os.makedirs(settings.prints_dir, exist_ok=True)
