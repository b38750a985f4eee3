import logging
import os

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.responses import HTMLResponse

from stripbooth.config import settings
from stripbooth.models.session import UploadRequest, UploadResponse
from stripbooth.services.storage import ExportStorage, parse_data_url
from stripbooth.api.dependencies import get_storage
from stripbooth.templates.viewer import get_viewer_template

logger = logging.getLogger(__name__)
router = APIRouter(tags=["uploads"])


def _base_url(request: Request) -> str:
    return (settings.public_base_url or str(request.base_url)).rstrip("/")


def _decode(request: UploadRequest, accepted_prefix: str):
    if len(request.dataUrl) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Payload too large")
    try:
        return parse_data_url(request.dataUrl, accepted_prefix)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid dataUrl")


@router.post("/api/upload", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_strip(body: UploadRequest, request: Request, storage: ExportStorage = Depends(get_storage)):
    mime_type, data = _decode(body, "image/png")
    try:
        filename = storage.save_strip(mime_type, data)
    except OSError:
        logger.exception("Saving strip failed")
        raise HTTPException(status_code=500, detail="Upload failed")

    base_url = _base_url(request)
    view_url = f"{base_url}/view/{filename}"
    return UploadResponse(viewUrl=view_url, downloadUrl=f"{base_url}/exports/{filename}",
                          qrDataUrl=storage.qr_data_url(view_url))


@router.post("/api/upload-print", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_print(body: UploadRequest, request: Request, storage: ExportStorage = Depends(get_storage)):
    mime_type, data = _decode(body, "image/png")
    try:
        filename = storage.save_print(mime_type, data)
    except OSError:
        logger.exception("Saving print failed")
        raise HTTPException(status_code=500, detail="Upload failed")

    return UploadResponse(printUrl=f"{_base_url(request)}/prints/{filename}")


@router.post("/api/upload-video", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_video(body: UploadRequest, request: Request, storage: ExportStorage = Depends(get_storage)):
    mime_type, data = _decode(body, "video/")
    try:
        filename = storage.save_video(mime_type, data)
    except OSError:
        logger.exception("Saving video failed")
        raise HTTPException(status_code=500, detail="Upload failed")

    base_url = _base_url(request)
    view_url = f"{base_url}/view/{filename}"
    return UploadResponse(viewUrl=view_url, downloadUrl=f"{base_url}/exports/{filename}",
                          qrDataUrl=storage.qr_data_url(view_url))


@router.get("/view/{filename}")
async def view_export(filename: str, request: Request, storage: ExportStorage = Depends(get_storage)):
    safe_name = os.path.basename(filename)
    if not os.path.exists(storage.export_path(safe_name)):
        raise HTTPException(status_code=404, detail="Not found")

    return HTMLResponse(get_viewer_template(f"{_base_url(request)}/exports/{safe_name}", safe_name))
