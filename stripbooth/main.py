from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import HTMLResponse

from stripbooth.config import settings
from stripbooth.api.routes import booth as booth_routes, uploads, websocket
from stripbooth.services.booth import booth
from stripbooth.templates.index import get_html_template

app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(booth_routes.router, prefix="/api")
app.include_router(uploads.router)
app.include_router(websocket.router)
app.mount("/exports", StaticFiles(directory=settings.exports_dir), name="exports")
app.mount("/prints", StaticFiles(directory=settings.prints_dir), name="prints")

@app.on_event("shutdown")
async def shutdown_event():
    await booth.shutdown()

@app.get("/")
async def get_index():
    return HTMLResponse(get_html_template())

@app.get("/health")
async def health_check():
    return {"status": "healthy", "camera_active": booth.camera.is_active, "phase": booth.status().phase}
