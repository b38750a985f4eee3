import json

import httpx
import pytest

from stripbooth.errors import UploadError
from stripbooth.services.uploader import UploadClient


def client_for(handler):
    return UploadClient(base_url="http://booth", timeout=5, transport=httpx.MockTransport(handler))


async def test_posts_data_url_and_parses_response():
    seen = []

    def handler(request):
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"viewUrl": "http://booth/view/a", "downloadUrl": "http://booth/exports/a",
                                         "qrDataUrl": "data:image/png;base64,qr"})

    result = await client_for(handler).upload_strip("data:image/png;base64,AAAA")

    assert seen == [("/api/upload", {"dataUrl": "data:image/png;base64,AAAA"})]
    assert result.downloadUrl == "http://booth/exports/a"
    assert result.qrDataUrl == "data:image/png;base64,qr"


async def test_each_operation_hits_its_endpoint():
    paths = []

    def handler(request):
        paths.append(request.url.path)
        return httpx.Response(200, json={})

    client = client_for(handler)
    await client.upload_print("data:image/png;base64,AA")
    await client.upload_video("data:video/webm;base64,AA")
    assert paths == ["/api/upload-print", "/api/upload-video"]


async def test_http_error_becomes_upload_error():
    client = client_for(lambda request: httpx.Response(500, json={"detail": "Upload failed"}))
    with pytest.raises(UploadError, match="500"):
        await client.upload_strip("data:image/png;base64,AA")


async def test_transport_failure_becomes_upload_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UploadError):
        await client_for(handler).upload_video("data:video/webm;base64,AA")


async def test_non_json_body_becomes_upload_error():
    client = client_for(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(UploadError):
        await client.upload_strip("data:image/png;base64,AA")
