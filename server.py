"""FastAPI application for the Alien Verdict narrative quiz."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Load .env from repo root so GEMINI_API_KEY etc. work when set locally
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import llm
from narrative_engine.question_bank import QUESTION_BANK, TOTAL_TURNS
from sessions import router as sessions_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: report the question bank and whether model explanations are available."""
    logger.info(f"Question bank loaded: {TOTAL_TURNS} turns")
    if llm.is_configured():
        logger.info("Gemini configured - explanations will be model-authored when possible")
    else:
        logger.info("GEMINI_API_KEY not set - explanations will use the scripted fallback")

    yield


app = FastAPI(title="Alien Verdict", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions_router, prefix="/api/sessions", tags=["sessions"])


@app.get("/health")
def health():
    """Health check for the host and frontend."""
    return {
        "status": "healthy",
        "text_generation": "configured" if llm.is_configured() else "fallback",
        "turns": len(QUESTION_BANK),
    }
