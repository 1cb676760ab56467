"""
VAANI HTTP Server - FastAPI surface

Thin wiring only. Every route returns a JSON envelope with HTTP 200 on
handled failures ({success: false, error}); the due-scanner is started and
stopped by the app lifespan.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from vaani.config import Settings
from vaani.core import Assistant, DueReminderScanner
from vaani.llm import Brain, build_brain
from vaani.memory import ReminderStore, to_iso_z, utc_now

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).with_name("static")


class ActRequest(BaseModel):
    text: Any = ""
    image: Any = None
    stt_confidence: Any = None


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ReminderStore] = None,
    brain: Optional[Brain] = None,
    scanner: Optional[DueReminderScanner] = None,
    run_scheduler: bool = True,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (default: Settings.from_env())
        store: Reminder store (default: file store at settings.reminders_file)
        brain: Brain (default: build_brain(settings))
        scanner: Due scanner (default: one over `store`)
        run_scheduler: Start the every-minute scan in the lifespan

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings.from_env()
    store = store or ReminderStore(settings.reminders_file)
    brain = brain or build_brain(settings)
    scanner = scanner or DueReminderScanner(store, settings.delivered_log)
    assistant = Assistant(store, brain, max_output_tokens=settings.brain_max_tokens)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_scheduler:
            scanner.start()
        try:
            yield
        finally:
            scanner.shutdown()

    app = FastAPI(title="Vaani API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.scanner = scanner
    app.state.assistant = assistant

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} rejected body: {exc.errors()}")
        return JSONResponse({"success": False, "error": "invalid request body"}, status_code=200)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} error: {exc}", exc_info=exc)
        return JSONResponse({"success": False, "error": str(exc)}, status_code=200)

    @app.get("/_health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "time": to_iso_z(utc_now())}

    @app.get("/sample_image")
    def sample_image():
        path = settings.sample_image_path
        if path.is_file():
            return FileResponse(path.resolve())
        return JSONResponse(
            {"error": "sample image not found", "path": str(path)},
            status_code=404,
        )

    @app.post("/act")
    def act(body: ActRequest) -> Dict[str, Any]:
        result = assistant.act(body.text, image=body.image, stt_confidence=body.stt_confidence)
        return result.to_dict()

    @app.get("/reminders")
    def list_reminders() -> Dict[str, Any]:
        try:
            reminders = store.load()
        except Exception as e:
            logger.error(f"GET /reminders error: {e}", exc_info=True)
            return {"success": False, "error": str(e)}
        return {"success": True, "reminders": [r.to_dict() for r in reminders]}

    @app.get("/check_due")
    def check_due() -> Dict[str, Any]:
        try:
            due = scanner.scan()
        except Exception as e:
            logger.error(f"GET /check_due error: {e}", exc_info=True)
            return {"success": False, "error": str(e)}
        return {"success": True, "due": [r.to_dict() for r in due]}

    @app.get("/", include_in_schema=False)
    def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html")

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    return app
