import logging
from typing import Optional

import httpx

from stripbooth.config import settings
from stripbooth.errors import UploadError
from stripbooth.models.session import UploadResponse

logger = logging.getLogger(__name__)


class UploadClient:
    """Client for the upload/QR/print endpoints. One request per call, no retries."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url or settings.upload_base_url
        self.timeout = timeout or settings.upload_timeout
        self.transport = transport

    async def _post(self, path: str, data_url: str) -> UploadResponse:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                     transport=self.transport) as client:
            try:
                response = await client.post(path, json={"dataUrl": data_url})
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as e:
                raise UploadError(f"{path} returned {e.response.status_code}") from e
            except (httpx.HTTPError, ValueError) as e:
                raise UploadError(f"{path} failed: {e}") from e

        if not isinstance(body, dict):
            raise UploadError(f"{path} returned an unexpected body")
        logger.info(f"Uploaded to {path}: {body.get('downloadUrl')}")
        return UploadResponse(**body)

    async def upload_strip(self, data_url: str) -> UploadResponse:
        return await self._post("/api/upload", data_url)

    async def upload_print(self, data_url: str) -> UploadResponse:
        return await self._post("/api/upload-print", data_url)

    async def upload_video(self, data_url: str) -> UploadResponse:
        return await self._post("/api/upload-video", data_url)
