import sys
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pathlib import Path

from scavenger_hunt.core.config import get_settings
from scavenger_hunt.presentation.api.v1.auth_routes import router as auth_router
from scavenger_hunt.presentation.api.v1.admin_routes import router as admin_router
from scavenger_hunt.presentation.api.v1.user_routes import router as user_router
from scavenger_hunt.presentation.api.routers.answers_router import router as answers_router
from scavenger_hunt.presentation.api.routers.hints_router import router as hints_router
from scavenger_hunt.presentation.api.routers.upload_router import router as upload_router
from scavenger_hunt.presentation.api.routers.events_router import router as events_router
from scavenger_hunt.infrastructure.db.session import Base, engine
import scavenger_hunt.infrastructure.db.models  # noqa: F401  registers tables

settings = get_settings()

# Create tables
Base.metadata.create_all(bind=engine)

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(title=settings.APP_NAME)

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal server error occurred."}
    )

# Include routers
app.include_router(auth_router, prefix="/admin", tags=["Admin auth"])
app.include_router(admin_router, prefix="/admin", tags=["Admin"])
app.include_router(user_router, tags=["Participants"])
app.include_router(answers_router)
app.include_router(hints_router)
app.include_router(upload_router)
app.include_router(events_router)

# Uploaded photos are served back from /uploads
uploads_dir = Path(settings.UPLOAD_ROOT) / "uploads"
uploads_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(uploads_dir)), name="uploads")


@app.get("/")
def root():
    return {"message": "Welcome to the Scavenger Hunt API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
