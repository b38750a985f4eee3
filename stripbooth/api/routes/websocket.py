import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends

from stripbooth.services.booth import Booth
from stripbooth.services.websocket import WebSocketManager
from stripbooth.api.dependencies import get_booth, get_websocket_manager

logger = logging.getLogger(__name__)
router = APIRouter()

@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    booth: Booth = Depends(get_booth),
    websocket_manager: WebSocketManager = Depends(get_websocket_manager)
):
    await websocket_manager.connect(websocket)
    try:
        await websocket.send_text(json.dumps({"type": "status", **booth.status().model_dump(mode="json")}))
        while True:
            frame = booth.camera.get_preview_frame()
            if frame:
                await websocket.send_text(json.dumps({
                    "type": "preview",
                    "data": frame
                }))
            await asyncio.sleep(1 / 15)  # ~15 FPS
    except WebSocketDisconnect:
        websocket_manager.disconnect(websocket)
    except Exception as e:
        logger.warning(f"WebSocket error: {e}")
        websocket_manager.disconnect(websocket)
