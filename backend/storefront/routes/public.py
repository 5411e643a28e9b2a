# /storefront/routes/public.py

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest
from datetime import datetime, timezone

from storefront.config.settings import settings
from storefront.models.api import APIResponse
from storefront.services.cache_service import cache_service
from storefront.services.woocommerce_service import WooCommerceService
from storefront.utils.dependencies import get_woocommerce_service, verify_metrics_access

# Health checks and the root endpoint. The /metrics endpoint is protected by
# an API key when one is configured.

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Storefront Catalog Gateway",
        "version": "1.0.0",
        "status": "operational",
        "environment": settings.environment
    }


@router.get("/health", summary="Basic Health Check")
async def health_check():
    """Basic health check for load balancers."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc)}


@router.get("/health/ready", summary="Readiness Probe")
async def readiness_check(catalog: WooCommerceService = Depends(get_woocommerce_service)):
    """Readiness probe: the catalog platform must answer with valid credentials."""
    result = await catalog.test_connection()
    if not result.success:
        raise HTTPException(status_code=503, detail=f"Service not ready: {result.message}")
    return {"status": "ready"}


@router.get("/health/detailed", response_model=APIResponse, tags=["Admin"])
async def comprehensive_health_check(
    request: Request,
    catalog: WooCommerceService = Depends(get_woocommerce_service),
    _: bool = Depends(verify_metrics_access),
):
    """Detailed health status of the catalog platform and the cache."""
    health_status = {"status": "healthy", "services": {}}

    connection = await catalog.test_connection()
    if connection.success:
        health_status["services"]["woocommerce"] = connection.data
    else:
        health_status["services"]["woocommerce"] = "error"
        health_status["status"] = "degraded"

    health_status["services"]["cache"] = "connected" if await cache_service.ping() else "unavailable"

    return APIResponse(
        success=True,
        message="Comprehensive health status retrieved.",
        data=health_status,
        version=settings.api_version
    )


@router.get("/metrics", tags=["Monitoring"])
async def metrics(request: Request, _: bool = Depends(verify_metrics_access)):
    """Secured Prometheus metrics endpoint."""
    return PlainTextResponse(generate_latest(), media_type="text/plain")
