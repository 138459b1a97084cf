"""
Pydantic Schemas for Request/Response Bodies

Request bodies are deliberately permissive: every field of a create is
optional and missing values are stored as null. Strict checks, when
enabled, happen in the order service rather than here.

Author: Khalil_Bannouri
Version: 1.0.0
"""

from typing import Any, Optional, Union

from pydantic import Field

from wlogistics.models import CamelModel, Customer, OrderItem


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderCreate(CamelModel):
    """Request schema for creating an order; any subset of fields."""
    tenant_id: Optional[str] = Field(None, examples=["t_wis"])
    code: Optional[str] = Field(None, examples=["WL-10001"])
    customer: Optional[Customer] = None
    origin: Optional[str] = Field(None, alias="from", examples=["Kho Tân Bình, HCM"])
    destination: Optional[str] = Field(None, alias="to", examples=["Q.1, HCM"])
    items: Optional[list[OrderItem]] = None
    price: Optional[Union[int, float]] = Field(None, examples=[45000])


class DriverAssign(CamelModel):
    """Optional body of the assign endpoint; both fields or neither."""
    name: str = Field(..., min_length=1, max_length=100, examples=["Nguyen Van An"])
    plate: str = Field(..., min_length=1, max_length=20, examples=["59A-123.45"])


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class HealthResponse(CamelModel):
    """Health check response."""
    ok: bool
    ts: int


class DeleteResponse(CamelModel):
    ok: bool = True


class KpiSnapshot(CamelModel):
    """Per-tenant counters shown on the admin view."""
    tenant_id: Optional[str]
    total: int
    delivered: int
    out_for_delivery: int
    active: int


class ErrorResponse(CamelModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None


# =============================================================================
# REALTIME FRAMES
# =============================================================================

class ClientFrame(CamelModel):
    """Frame sent by a websocket client, e.g. {"event": "join", "data": {...}}."""
    event: str
    data: dict[str, Any] = Field(default_factory=dict)


class ServerFrame(CamelModel):
    """Frame pushed to subscribers: the event kind and a minimal payload."""
    event: str
    data: dict[str, Any]
