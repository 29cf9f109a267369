import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .log import setup_logging
from .models import DealsEnvelope, HealthResponse
from .normalize import build_failure, build_success, extract_deals
from .reader import read_table

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="deal-feed",
    description="Commission deal feed extracted from the sales spreadsheet",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.get("/deals", response_model=DealsEnvelope)
def deals(settings: Settings = Depends(get_settings)):
    # faults are reported in the body; the status stays 200
    try:
        grid = read_table(settings.source_path)
        found = extract_deals(grid)
    except Exception as exc:
        logger.exception("deal extraction failed for %s", settings.source_path)
        return build_failure(exc)

    logger.info("%d deals found in %s", len(found), settings.source_path)
    return build_success(found)
