from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import Response

from stripbooth.errors import SessionStateError
from stripbooth.models.session import SessionStatusResponse
from stripbooth.services.booth import Booth
from stripbooth.services.render import encode_image
from stripbooth.api.dependencies import get_booth

router = APIRouter(prefix="/booth", tags=["booth"])


@router.post("/start", response_model=SessionStatusResponse)
async def start_session(booth: Booth = Depends(get_booth)):
    await booth.start_session()
    return booth.status()


@router.post("/select/{index}", response_model=SessionStatusResponse)
async def toggle_selection(index: int, booth: Booth = Depends(get_booth)):
    try:
        return await booth.toggle_selection(index)
    except SessionStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/frame/{index}", response_model=SessionStatusResponse)
async def choose_frame(index: int, booth: Booth = Depends(get_booth)):
    try:
        return await booth.choose_frame(index)
    except SessionStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/export", response_model=SessionStatusResponse)
async def export_and_upload(booth: Booth = Depends(get_booth)):
    try:
        return await booth.export_and_upload()
    except SessionStateError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/reset")
async def reset_session(booth: Booth = Depends(get_booth)):
    await booth.reset()
    return {"success": True}


@router.get("/status", response_model=SessionStatusResponse)
async def get_status(booth: Booth = Depends(get_booth)):
    return booth.status()


@router.get("/stills/{index}.jpg")
async def get_still(index: int, booth: Booth = Depends(get_booth)):
    try:
        return Response(booth.still_jpeg(index), media_type="image/jpeg")
    except (SessionStateError, IndexError):
        raise HTTPException(status_code=404, detail="Photo not found")


@router.get("/frames/{index}.png")
async def get_frame_option(index: int, booth: Booth = Depends(get_booth)):
    try:
        return Response(booth.frame_option_png(index), media_type="image/png")
    except (SessionStateError, IndexError):
        raise HTTPException(status_code=404, detail="Frame not found")


@router.get("/preview.png")
async def get_preview(booth: Booth = Depends(get_booth)):
    try:
        return Response(encode_image(booth.preview()), media_type="image/png")
    except SessionStateError:
        raise HTTPException(status_code=404, detail="No active session")
