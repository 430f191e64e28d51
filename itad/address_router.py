"""FastAPI router for address verification endpoints.

Exposes the verifier to the booking frontend together with the postcode
format checks, the supported country table and road distance estimates.
Candidates are supplied by the caller, either already shaped as
GeoCandidate fields or as raw Nominatim search results.
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from itad.address_models import AddressInput, GeoCandidate, VerificationResult
from itad.address_verifier import AddressVerifier
from itad.config import cfg
from itad.countries import COUNTRY_REGISTRY
from itad.postcode_validator import check_postcode, extract_postcode
from itad.routing import road_distance
from itad.utils.resilience import VerificationAuditLog, audit_entry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/address", tags=["Address Verification"])

# Replaced by configure_router() at app startup
_verifier: AddressVerifier = AddressVerifier()
_audit_log: VerificationAuditLog | None = (
    VerificationAuditLog(cfg.audit_log_size) if cfg.enable_audit_log else None
)


def configure_router(
    verifier: AddressVerifier | None = None,
    audit_log: VerificationAuditLog | None = None,
) -> None:
    """Configure the router with its dependencies.

    Args:
        verifier: Verifier to use; a default-configured one if None.
        audit_log: Audit log to record verifications in; None disables it.
    """
    global _verifier, _audit_log
    _verifier = verifier or AddressVerifier()
    _audit_log = audit_log
    logger.info(f"Address router configured (audit={'enabled' if audit_log else 'disabled'})")


# ============================================================================
# Request/Response Models
# ============================================================================


class AddressModel(BaseModel):
    """Collection address as typed by the user."""

    street: str = Field(default="", max_length=500)
    city: str = Field(default="", max_length=500)
    county: str = Field(default="", max_length=500)
    postcode: str = Field(default="", max_length=50, examples=["77120", "SW1A 1AA"])
    country: str = Field(default="", max_length=100, examples=["France", "United Kingdom"])


class CandidateModel(BaseModel):
    """One geocoder candidate; unknown fields are ignored."""

    display_name: str = ""
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    road: str | None = None
    city: str | None = None
    town: str | None = None
    village: str | None = None
    municipality: str | None = None
    locality: str | None = None
    post_town: str | None = None
    suburb: str | None = None
    neighbourhood: str | None = None
    county: str | None = None
    state: str | None = None
    region: str | None = None
    province: str | None = None
    postcode: str | None = None
    country_name: str | None = None
    country_code: str | None = None


class VerifyRequest(BaseModel):
    """Request model for verification with shaped candidates."""

    address: AddressModel
    candidates: list[CandidateModel] = Field(default_factory=list, max_length=100)


class NominatimVerifyRequest(BaseModel):
    """Request model for verification with raw Nominatim results."""

    address: AddressModel
    results: list[dict[str, Any]] = Field(default_factory=list, max_length=100)


class FieldVerdictModel(BaseModel):
    status: str
    reason: str | None = None


class LatLngModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class VerifyResponse(BaseModel):
    """Response model for address verification."""

    fields: dict[str, FieldVerdictModel]
    coordinates: LatLngModel | None
    country_code: str | None
    blocked: bool
    warnings: list[str]
    diagnostics: dict[str, Any]


class PostcodeValidateRequest(BaseModel):
    postcode: str = Field(..., max_length=50)
    country: str | None = Field(default=None, max_length=100)


class PostcodeValidateResponse(BaseModel):
    valid: bool
    country_code: str | None
    lenient: bool


class PostcodeExtractRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)


class PostcodeExtractResponse(BaseModel):
    postcode: str | None


class CountryResponse(BaseModel):
    code: str
    name: str
    postcode_format: str
    example: str


class DistanceRequest(BaseModel):
    """Request model for road distance between site and warehouse."""

    origin: LatLngModel
    destination: LatLngModel
    osrm_response: dict[str, Any] | None = Field(
        default=None,
        description="OSRM route response for this pair, if already fetched",
    )
    round_trip: bool = True


class DistanceResponse(BaseModel):
    distance_km: float
    estimated: bool
    round_trip: bool


# ============================================================================
# Helpers
# ============================================================================


def _run_verification(
    address_model: AddressModel,
    candidates: list[GeoCandidate],
    source: str,
) -> VerifyResponse:
    address = AddressInput.from_dict(address_model.model_dump(), max_length=cfg.max_field_length)
    result = _verifier.verify(address, candidates)
    if _audit_log is not None:
        _audit_log.log(audit_entry(result, address, len(candidates), source))
    return _to_response(result)


def _to_response(result: VerificationResult) -> VerifyResponse:
    data = result.to_dict()
    return VerifyResponse(
        fields=data["fields"],
        coordinates=data["coordinates"],
        country_code=data["country_code"],
        blocked=data["blocked"],
        warnings=result.warnings,
        diagnostics=data["diagnostics"],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/verify", response_model=VerifyResponse)
async def verify_address(request: VerifyRequest) -> VerifyResponse:
    """Verify an address against caller-supplied geocoder candidates.

    Verdicts are always returned with HTTP 200; ``blocked`` tells the
    frontend whether submission must be prevented.
    """
    candidates = [GeoCandidate(**c.model_dump()) for c in request.candidates]
    return _run_verification(request.address, candidates, source="api")


@router.post("/verify/nominatim", response_model=VerifyResponse)
async def verify_address_nominatim(request: NominatimVerifyRequest) -> VerifyResponse:
    """Verify an address against raw Nominatim search results.

    Results whose coordinates cannot be parsed are skipped.
    """
    candidates = []
    for item in request.results:
        try:
            candidates.append(GeoCandidate.from_nominatim(item))
        except ValueError as e:
            logger.warning(f"Skipping geocoder result: {e}")
    return _run_verification(request.address, candidates, source="nominatim")


@router.post("/postcode/validate", response_model=PostcodeValidateResponse)
async def validate_postcode(request: PostcodeValidateRequest) -> PostcodeValidateResponse:
    """Check postcode format for a country, or for any country if unknown."""
    check = check_postcode(request.postcode, request.country)
    return PostcodeValidateResponse(**check.to_dict())


@router.post("/postcode/extract", response_model=PostcodeExtractResponse)
async def extract_postcode_from_text(request: PostcodeExtractRequest) -> PostcodeExtractResponse:
    """Find a European-format postcode inside free text."""
    return PostcodeExtractResponse(postcode=extract_postcode(request.text))


@router.get("/countries", response_model=list[CountryResponse])
async def list_countries() -> list[CountryResponse]:
    """List supported countries with their postcode formats."""
    return [
        CountryResponse(
            code=info.code.value,
            name=info.name,
            postcode_format=info.description,
            example=info.example,
        )
        for info in sorted(COUNTRY_REGISTRY.values(), key=lambda i: i.name)
    ]


@router.post("/distance", response_model=DistanceResponse)
async def distance(request: DistanceRequest) -> DistanceResponse:
    """Road distance between a collection site and a warehouse."""
    result = road_distance(
        (request.origin.lat, request.origin.lng),
        (request.destination.lat, request.destination.lng),
        request.osrm_response,
    )
    if request.round_trip:
        result = result.doubled()
    return DistanceResponse(
        distance_km=round(result.km, 3),
        estimated=result.estimated,
        round_trip=request.round_trip,
    )


@router.get("/audit/stats")
async def audit_stats() -> dict[str, Any]:
    """Aggregate verification counters and the most recent entries."""
    if _audit_log is None:
        return {"enabled": False}
    return {
        "enabled": True,
        "stats": _audit_log.get_stats(),
        "recent": _audit_log.get_recent(10),
    }
