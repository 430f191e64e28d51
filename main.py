"""
ITAD Address Verification Service
Run with: uvicorn main:app --reload --port 8000

Verifies collection addresses typed into the booking form against
geocoder candidates fetched by the frontend. No external services are
required by this process.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()  # Must be before importing config

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from itad.address_router import configure_router, router as address_router
from itad.address_verifier import AddressVerifier
from itad.config import Config
from itad.countries import COUNTRY_REGISTRY
from itad.utils.resilience import VerificationAuditLog

cfg = Config()  # Fresh instance after dotenv loaded

logging.basicConfig(
    level=getattr(logging, cfg.log_level, logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    audit_log = VerificationAuditLog(cfg.audit_log_size) if cfg.enable_audit_log else None
    configure_router(
        verifier=AddressVerifier(cfg.match_thresholds()),
        audit_log=audit_log,
    )
    logger.info(
        f"Address verification ready: {len(COUNTRY_REGISTRY)} countries, "
        f"thresholds={cfg.match_thresholds()}"
    )
    yield
    logger.info("Address verification shutting down")


app = FastAPI(title="ITAD Address Verification", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(address_router)


@app.get("/api/health")
async def health():
    """Health check"""
    return {
        "status": "healthy",
        "countries": len(COUNTRY_REGISTRY),
        "audit_log": cfg.enable_audit_log,
    }
