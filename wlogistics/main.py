"""
FastAPI Application Entry Point

WLogistics Order Tracking - multi-tenant delivery demo backend.
Holds orders in memory and notifies tenant rooms over a websocket whenever
an order is created, updated or deleted.

Endpoints:
    - GET /api/health: Liveness probe
    - GET /api/tenants: Tenant catalog
    - GET /api/orders: List orders (by tenant, by driver name)
    - GET /api/orders/{id}: Single order
    - GET /api/orders/track/{code}: Lookup by human-readable code
    - GET /api/kpis: Per-tenant counters
    - POST /api/orders: Create order
    - PATCH /api/orders/{id}/status: Advance status one step
    - PATCH /api/orders/{id}/assign: Assign a driver
    - DELETE /api/orders/{id}: Delete order
    - WS /ws: Join tenant rooms and receive order events

The realtime channel speaks plain JSON frames ({"event": ..., "data": ...})
over a bare websocket. It is not the Socket.IO protocol, so a
socket.io-client frontend needs a plain WebSocket adapter that sends the
same ``join`` frame and dispatches on ``event``.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Body, Depends, FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from wlogistics.core.config import get_settings, setup_logging
from wlogistics.core.exceptions import OrderValidationError, WLogisticsError
from wlogistics.models import TENANTS, Order, Tenant
from wlogistics.schemas import (
    ClientFrame,
    DeleteResponse,
    DriverAssign,
    ErrorResponse,
    HealthResponse,
    KpiSnapshot,
    OrderCreate,
)
from wlogistics.seed import seed_demo_orders
from wlogistics.services import OrderService, get_order_service
from wlogistics.services.realtime import WebSocketSubscriber

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    current = get_settings()
    logger.info("=" * 60)
    logger.info(f"🚚 Starting {current.app_name}")
    logger.info(f"   Version: {current.app_version}")
    logger.info(f"   Environment: {current.env_mode.value}")
    logger.info(f"   Debug: {current.debug}")
    logger.info(f"   CORS origins: {current.cors_origins_list}")
    logger.info("=" * 60)

    service = get_order_service()
    if current.seed_demo_orders and len(service.store) == 0:
        await seed_demo_orders(service)

    logger.info(f"✅ Realtime: {service.broadcaster.provider_name} broadcaster")
    logger.info("✅ Application ready!")

    yield  # Application runs

    logger.info("Shutting down; in-memory orders are discarded")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Multi-tenant delivery order tracking with realtime tenant rooms. "
        "State is in-memory and process-local."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)


# =============================================================================
# HEALTH & CATALOG ENDPOINTS
# =============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Report liveness with the server clock in epoch milliseconds."""
    return HealthResponse(ok=True, ts=int(time.time() * 1000))


@app.get("/api/tenants", response_model=list[Tenant], tags=["Tenants"])
async def list_tenants() -> list[Tenant]:
    return list(TENANTS)


# =============================================================================
# ORDER QUERY ENDPOINTS
# =============================================================================

@app.get("/api/orders", response_model=list[Order], tags=["Orders"], summary="List Orders")
async def list_orders(
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    driver: Optional[str] = Query(None, description="Substring of the driver name"),
    service: OrderService = Depends(get_order_service),
) -> list[Order]:
    """All orders newest first, optionally narrowed to a tenant and/or driver."""
    return service.list_orders(tenant_id=tenant_id, driver=driver)


@app.get(
    "/api/orders/track/{code}",
    response_model=Order,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def track_order(code: str, service: OrderService = Depends(get_order_service)) -> Order:
    """Look an order up by its code (WL-10001), case-insensitively."""
    return service.track(code)


@app.get(
    "/api/orders/{order_id}",
    response_model=Order,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)) -> Order:
    return service.get_order(order_id)


@app.get("/api/kpis", response_model=KpiSnapshot, tags=["Orders"])
async def order_kpis(
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    service: OrderService = Depends(get_order_service),
) -> KpiSnapshot:
    """Delivered, out-for-delivery and active counts for the admin view."""
    return service.kpis(tenant_id)


# =============================================================================
# ORDER COMMAND ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=Order,
    status_code=201,
    responses={422: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Create Order",
)
async def create_order(
    order_data: Optional[OrderCreate] = Body(None),
    service: OrderService = Depends(get_order_service),
) -> Order:
    """
    Create a new order in status Created.

    Fields are not validated unless STRICT_ORDER_VALIDATION is on; anything
    missing is stored as null. Publishes ``order.created`` to the tenant room.
    """
    return await service.create_order(order_data)


@app.patch(
    "/api/orders/{order_id}/status",
    response_model=Order,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def advance_order(order_id: str, service: OrderService = Depends(get_order_service)) -> Order:
    """Move the order one step along the status flow (no-op once Delivered)."""
    return await service.advance_order(order_id)


@app.patch(
    "/api/orders/{order_id}/assign",
    response_model=Order,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def assign_driver(
    order_id: str,
    driver: Optional[DriverAssign] = Body(None),
    service: OrderService = Depends(get_order_service),
) -> Order:
    """Assign a driver; without a body the next roster driver is used."""
    return await service.assign_driver(order_id, driver)


@app.delete(
    "/api/orders/{order_id}",
    response_model=DeleteResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def delete_order(order_id: str, service: OrderService = Depends(get_order_service)) -> DeleteResponse:
    await service.remove_order(order_id)
    return DeleteResponse(ok=True)


# =============================================================================
# REALTIME ENDPOINT
# =============================================================================

@app.websocket("/ws")
async def realtime_socket(websocket: WebSocket, service: OrderService = Depends(get_order_service)) -> None:
    """
    Tenant room subscription channel.

    Client frames:
        {"event": "join", "data": {"tenantId": "t_wis"}}
        {"event": "leave", "data": {"tenantId": "t_wis"}}   (no tenantId: all rooms)
        {"event": "ping"}                                   (answered with pong)

    Server frames:
        {"event": "order.created" | "order.updated" | "order.deleted", "data": {"id": ...}}
    """
    broadcaster = service.broadcaster
    await websocket.accept()
    subscriber = WebSocketSubscriber(websocket)
    logger.info(f"{subscriber.subscriber_id} connected")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                logger.debug(f"{subscriber.subscriber_id} sent a binary frame; ignored")
                continue
            try:
                frame = ClientFrame.model_validate_json(raw)
            except ValidationError:
                logger.debug(f"{subscriber.subscriber_id} sent malformed frame: {raw[:100]}")
                continue

            tenant_id = frame.data.get("tenantId")
            if not isinstance(tenant_id, str):
                tenant_id = None

            if frame.event == "join":
                broadcaster.subscribe(subscriber, tenant_id)
            elif frame.event == "leave":
                broadcaster.unsubscribe(subscriber, tenant_id)
            elif frame.event == "ping":
                await subscriber.send("pong", {"ts": int(time.time() * 1000)})
            else:
                logger.debug(f"{subscriber.subscriber_id} sent unknown event {frame.event!r}")
    except WebSocketDisconnect:
        logger.info(f"{subscriber.subscriber_id} disconnected")
    finally:
        broadcaster.unsubscribe(subscriber)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(WLogisticsError)
async def application_error_handler(request: Request, exc: WLogisticsError) -> JSONResponse:
    """Map application errors onto their HTTP status."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail or exc.message}")

    content = {"error": exc.message}
    if isinstance(exc, OrderValidationError) or get_settings().debug:
        content["detail"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if get_settings().debug else "An unexpected error occurred",
        },
    )


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    current = get_settings()
    uvicorn.run(
        "wlogistics.main:app",
        host=current.api_host,
        port=current.api_port,
        log_level="debug" if current.debug else "info",
    )


if __name__ == "__main__":
    run()
