"""API response models."""

from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel


class PhoneResponse(BaseModel):
    kind: str
    number: str


class CustomerResponse(BaseModel):
    """A stored customer."""

    id: int
    name: str
    email: str
    birth_date: date
    credit_limit: Optional[Decimal] = None
    nickname: Optional[str] = None
    phones: list[PhoneResponse] = []


class ViolationResponse(BaseModel):
    """A single message as rendered for API clients."""

    category: str
    message: str
    severity: Literal["error", "warn", "info"]
    code: Optional[str] = None


class CreateCustomerResponse(BaseModel):
    """Created customer plus non-blocking messages."""

    customer: CustomerResponse
    warnings: list[ViolationResponse] = []
    info: list[ViolationResponse] = []


class CustomerListResponse(BaseModel):
    """Customer listing, optionally carrying messages from a forwarded request."""

    customers: list[CustomerResponse]
    errors: list[ViolationResponse] = []


class HealthDependency(BaseModel):
    """Health status of a single dependency."""

    status: Literal["healthy", "unhealthy", "degraded"]
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """System health check response."""

    status: Literal["healthy", "unhealthy", "degraded"]
    version: str = "1.0.0"
    uptime_seconds: float
    constraint_kinds: int
    locales: list[str]
    dependencies: dict[str, HealthDependency]
