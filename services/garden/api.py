"""FastAPI application exposing the garden use-cases over JSON HTTP.

Every response carries `success`. Failures add `error`:
400 for bad input and rule rejections, 403 for admin-only routes,
404 for unknown plants on the details route, 409 when another request
changed the visitor's state first (retryable), 500 for anything else.
"""

import logging
from collections.abc import Awaitable
from datetime import UTC, datetime

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from gardenplots import (
    ConcurrentUpdateError,
    HarvestPlantRequest,
    PlantSeedRequest,
    PurchaseSeedRequest,
)

from services.garden.config import GardenSettings
from services.garden.credentials import Credentials
from services.garden.results import Rejection, UseCaseResult
from services.garden.service import GardenService

logger = logging.getLogger(__name__)

_REJECTION_STATUS = {
    Rejection.NOT_ADMIN: 403,
}


def get_credentials(
    visitor_id: str = Query(..., alias="visitorId", min_length=1),
    url_slug: str = Query(..., alias="urlSlug", min_length=1),
    profile_id: str = Query(..., alias="profileId", min_length=1),
    display_name: str = Query("", alias="displayName"),
    asset_id: str = Query("", alias="assetId"),
) -> Credentials:
    """Visitor identity from the query string. Trusted as given."""
    return Credentials(
        visitor_id=visitor_id,
        url_slug=url_slug,
        profile_id=profile_id,
        display_name=display_name,
        asset_id=asset_id,
    )


def _failure(status_code: int, error: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


async def _respond(call: Awaitable[UseCaseResult], *, not_found_status: int = 400) -> JSONResponse:
    """Await a use-case and turn its outcome into a JSON response."""
    try:
        result = await call
    except ConcurrentUpdateError as e:
        logger.warning("Concurrent update rejected: %s", e)
        return _failure(
            409,
            "Your garden changed while this request was running. Please try again.",
            retryable=True,
        )
    except Exception:
        logger.exception("Garden request failed")
        return _failure(500, "Internal server error")

    if result.ok:
        return JSONResponse(content={"success": True, **result.body})

    if result.rejection is Rejection.NOT_FOUND:
        status = not_found_status
    else:
        status = _REJECTION_STATUS.get(result.rejection, 400)
    return _failure(status, result.error)


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg', 'invalid')}" if location else error.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid request"


def create_app(service: GardenService, settings: GardenSettings | None = None) -> FastAPI:
    """Build the garden HTTP app around an already wired GardenService."""
    settings = settings or GardenSettings()
    started_at = datetime.now(UTC)

    app = FastAPI(
        title="Garden Plots API",
        version=settings.app_version,
        description="Claim a plot, buy seeds, plant them and harvest them for coins.",
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _describe_validation_error(exc)
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
        return _failure(400, message)

    @app.get("/system/health")
    async def health() -> dict[str, str]:
        return {
            "status": "OK",
            "appVersion": settings.app_version,
            "serverStartDate": started_at.isoformat(),
        }

    @app.get("/home-instructions")
    async def home_instructions() -> JSONResponse:
        return await _respond(service.home_instructions())

    @app.get("/game-state")
    async def game_state(creds: Credentials = Depends(get_credentials)) -> JSONResponse:
        return await _respond(
            service.get_state(creds, is_admin=settings.is_admin(creds.profile_id))
        )

    @app.post("/plot/claim")
    async def claim_plot(creds: Credentials = Depends(get_credentials)) -> JSONResponse:
        return await _respond(service.claim_plot(creds))

    @app.get("/plot/details")
    async def plot_details(creds: Credentials = Depends(get_credentials)) -> JSONResponse:
        return await _respond(service.plot_details(creds))

    @app.get("/seed/menu")
    async def seed_menu(creds: Credentials = Depends(get_credentials)) -> JSONResponse:
        return await _respond(service.seed_menu(creds))

    @app.post("/seed/purchase")
    async def purchase_seed(
        payload: PurchaseSeedRequest,
        creds: Credentials = Depends(get_credentials),
    ) -> JSONResponse:
        return await _respond(service.purchase_seed(creds, payload.seed_id))

    @app.post("/plant/drop")
    async def plant_seed(
        payload: PlantSeedRequest,
        creds: Credentials = Depends(get_credentials),
    ) -> JSONResponse:
        return await _respond(
            service.plant_seed(creds, payload.seed_id, payload.square_index)
        )

    @app.post("/plant/harvest")
    async def harvest_plant(
        payload: HarvestPlantRequest,
        creds: Credentials = Depends(get_credentials),
    ) -> JSONResponse:
        return await _respond(service.harvest_plant(creds, payload.plant_id))

    @app.get("/plant/details")
    async def plant_details(
        plant_id: str = Query(..., alias="plantId", min_length=1),
        creds: Credentials = Depends(get_credentials),
    ) -> JSONResponse:
        return await _respond(service.plant_details(creds, plant_id), not_found_status=404)

    @app.post("/update-growth-levels")
    async def update_growth_levels(creds: Credentials = Depends(get_credentials)) -> JSONResponse:
        return await _respond(service.update_growth_levels(creds))

    @app.post("/remove-all-plants")
    async def remove_all_plants(creds: Credentials = Depends(get_credentials)) -> JSONResponse:
        return await _respond(
            service.remove_all_plants(creds, is_admin=settings.is_admin(creds.profile_id))
        )

    return app
