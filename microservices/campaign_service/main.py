"""
Campaign Service Main Application

FastAPI application for fundraising campaign management.
Port: 8240
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from core.config_manager import ConfigManager
from core.logger import setup_service_logger

from .campaign_service import CampaignService
from .factory import CampaignServiceFactory
from .models import (
    CampaignCreateRequest,
    CampaignListResponse,
    CampaignResponse,
    CampaignUpdateRequest,
    CompletionRunSummary,
    DeleteCampaignResponse,
    ErrorResponse,
    HealthResponse,
)
from .protocols import (
    CampaignNotFoundError,
    CampaignPermissionError,
    CampaignRepositoryError,
    CampaignValidationError,
    InvalidCampaignArgumentError,
)
from .scheduler import CompletionScheduler

# Service configuration
SERVICE_NAME = "campaign_service"
SERVICE_VERSION = "1.0.0"

config_manager = ConfigManager(SERVICE_NAME)
config = config_manager.get_service_config()
SERVICE_PORT = config.service_port or 8240

# Configure logging
logger = setup_service_logger(
    SERVICE_NAME,
    level=config.log_level.upper(),
    config=config_manager.get_logging_config(),
)

# Print configuration info (development environment)
if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global factory instance
factory: Optional[CampaignServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    try:
        factory = CampaignServiceFactory(config_manager)
        await factory.initialize()

        if factory.scheduler:
            logger.info(f"✅ Completion scheduler started (next run {factory.scheduler.next_run_time})")
        else:
            logger.warning("⚠️  Completion scheduler not running")
        if not factory.nats_client:
            logger.warning("⚠️  Event bus unavailable, campaign events will not be published")

        logger.info(f"✅ Campaign service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize campaign service: {e}")
        raise
    finally:
        logger.info(f"Shutting down {SERVICE_NAME}")
        if factory:
            await factory.close()
            factory = None


# Create FastAPI application
app = FastAPI(
    title="Campaign Service",
    description="Fundraising campaign lifecycle: creation, updates, deletion and deadline completion",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


# Documented on every campaign route
ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def error_response(status_code: int, error: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error.model_dump())


@app.exception_handler(CampaignValidationError)
async def validation_error_handler(request: Request, exc: CampaignValidationError):
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorResponse(detail=str(exc), error_code="validation_error", field=exc.field),
    )


@app.exception_handler(InvalidCampaignArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidCampaignArgumentError):
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(detail=str(exc), error_code="invalid_argument", field=exc.field),
    )


@app.exception_handler(CampaignNotFoundError)
async def campaign_not_found_handler(request: Request, exc: CampaignNotFoundError):
    return error_response(
        status.HTTP_404_NOT_FOUND,
        ErrorResponse(detail=str(exc), error_code="not_found"),
    )


@app.exception_handler(CampaignPermissionError)
async def permission_error_handler(request: Request, exc: CampaignPermissionError):
    return error_response(
        status.HTTP_403_FORBIDDEN,
        ErrorResponse(detail=str(exc), error_code="permission_denied"),
    )


@app.exception_handler(CampaignRepositoryError)
async def repository_error_handler(request: Request, exc: CampaignRepositoryError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(detail="Campaign storage unavailable", error_code="storage_unavailable"),
    )


# ====================
# Dependencies
# ====================


def get_service() -> CampaignService:
    """Get campaign service from factory"""
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return factory.service


def get_scheduler() -> Optional[CompletionScheduler]:
    """Get completion scheduler, None when not running"""
    return factory.scheduler if factory else None


# ====================
# Health Endpoints
# ====================


@app.get("/api/v1/campaigns/health", response_model=HealthResponse, tags=["Health"])
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}

    if factory:
        try:
            db_healthy = await factory.repository.health_check()
            dependencies["postgres"] = "healthy" if db_healthy else "unhealthy"
        except Exception:
            dependencies["postgres"] = "unhealthy"

        if factory.nats_client:
            dependencies["nats"] = "healthy" if factory.nats_client.is_connected else "unhealthy"
        else:
            dependencies["nats"] = "not_configured"

        dependencies["scheduler"] = "healthy" if factory.scheduler and factory.scheduler.running else "not_configured"

    overall = "healthy" if all(v in ("healthy", "not_configured") for v in dependencies.values()) else "degraded"

    return HealthResponse(
        status=overall,
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


# ====================
# Campaign Endpoints
# ====================


@app.post(
    "/api/v1/campaigns",
    response_model=CampaignResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Campaigns"],
)
async def create_campaign(
    request: CampaignCreateRequest,
    service: CampaignService = Depends(get_service),
):
    """Create a new campaign in active status"""
    campaign = await service.create_campaign(request)
    return CampaignResponse(campaign=campaign)


@app.get(
    "/api/v1/campaigns/owners/{owner_id}",
    response_model=CampaignListResponse,
    responses=ERROR_RESPONSES,
    tags=["Campaigns"],
)
async def get_campaigns_by_owner(
    owner_id: int,
    service: CampaignService = Depends(get_service),
):
    """List an owner's campaigns"""
    campaigns = await service.get_campaigns_by_owner(owner_id)
    return CampaignListResponse(campaigns=campaigns, total=len(campaigns))


@app.get(
    "/api/v1/campaigns/{campaign_id}",
    response_model=CampaignResponse,
    responses=ERROR_RESPONSES,
    tags=["Campaigns"],
)
async def get_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_service),
):
    """Get campaign by ID"""
    campaign = await service.get_campaign(campaign_id)
    return CampaignResponse(campaign=campaign)


@app.patch(
    "/api/v1/campaigns/{campaign_id}",
    response_model=CampaignResponse,
    responses=ERROR_RESPONSES,
    tags=["Campaigns"],
)
async def update_campaign(
    campaign_id: str,
    request: CampaignUpdateRequest,
    service: CampaignService = Depends(get_service),
):
    """
    Partially update a campaign

    The body carries owner_id; only that owner's campaign is updated.
    Zero values in the body leave the stored field untouched.
    """
    campaign = await service.update_campaign(
        request.model_copy(update={"campaign_id": campaign_id})
    )
    return CampaignResponse(campaign=campaign)


@app.delete(
    "/api/v1/campaigns/{campaign_id}",
    response_model=DeleteCampaignResponse,
    responses=ERROR_RESPONSES,
    tags=["Campaigns"],
)
async def delete_campaign(
    campaign_id: str,
    owner_id: Optional[int] = Query(None, description="Restrict the delete to this owner"),
    service: CampaignService = Depends(get_service),
):
    """Delete a campaign"""
    return await service.delete_campaign(campaign_id, owner_id=owner_id)


# ====================
# Operations
# ====================


@app.post(
    "/api/v1/campaigns/jobs/complete-expired",
    response_model=CompletionRunSummary,
    tags=["Operations"],
)
async def run_completion_job(
    service: CampaignService = Depends(get_service),
    scheduler: Optional[CompletionScheduler] = Depends(get_scheduler),
):
    """Run the expired-campaign completion job now"""
    if scheduler:
        return await scheduler.run_once()
    return await service.complete_expired_campaigns()


# ====================
# Main Entry Point
# ====================


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.campaign_service.main:app",
        host=config.service_host,
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
