import uvicorn
from stripbooth.config import settings
from stripbooth.logging_config import configure_logging
from stripbooth.main import app

if __name__ == "__main__":
    configure_logging(level=settings.log_level, log_file=settings.log_file)

    print("🚀 Starting StripBooth...")
    print(f"🌐 Access the photobooth at: http://{settings.host}:{settings.port}")
    print(f"📁 Strips and videos will be saved to: {settings.exports_dir}")
    print(f"🖨️  Print copies will be queued in: {settings.prints_dir}")
    print(f"🖼️  Frame backgrounds are read from: {settings.frames_dir}")
    print("\n📸 Session flow:")
    print(f"   - {settings.shot_count} shots, {settings.countdown_seconds}s countdown each, clip recorded per shot")
    print(f"   - Pick {settings.selection_limit} for the strip, choose a frame")
    print("   - Strip, print copy and highlight video uploaded with QR codes")
    print("\n🛑 Press Ctrl+C to stop the server\n")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None
    )
