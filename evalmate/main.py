"""
FastAPI main application
EvalMate - shared document service for classroom presentation evaluation

Routers in evalmate/api/:
- health.py: Health check
- data.py: Whole-document read, per-collection get/put, reset

The document is a single JSON file under EVALMATE_DATA_DIR.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
import logging
import os

from evalmate import state
from evalmate.core.document import DATA_FILE_NAME, DocumentFile

from evalmate.api import data, health


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def data_file_path() -> Path:
    return Path(os.environ.get("EVALMATE_DATA_DIR", ".")) / DATA_FILE_NAME


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup: open (and create if needed) the document file
    state.DOCUMENT = DocumentFile(data_file_path())
    state.DOCUMENT.ensure()
    logger.info(f"✅ Document service using {state.DOCUMENT.path}")

    yield

    # Shutdown
    logger.info("🛑 Document service shutting down")


# Create FastAPI app
app = FastAPI(
    title="EvalMate - Document Service",
    description="Shared JSON document for teams, scores, questions and session",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware (allow all origins: classroom devices on the local network)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== INCLUDE ROUTERS ====================

app.include_router(health.router)
app.include_router(data.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 3001)))
