from __future__ import annotations

from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field


BillingCycle = Literal["monthly", "six-month", "yearly", "two-year"]


class Deal(BaseModel):
    id: int = Field(ge=1)
    name: str = Field(min_length=1)
    close: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$", examples=["2025-07-01"])
    subscription: float = Field(gt=0, allow_inf_nan=False)
    setup: float = Field(default=0, allow_inf_nan=False)
    cycle: BillingCycle = "monthly"
    churnDate: Optional[str] = Field(default=None, examples=[None])


class DealsResponse(BaseModel):
    success: Literal[True] = True
    data: List[Deal] = Field(default_factory=list)
    timestamp: str = Field(examples=["2025-07-01T12:00:00.000Z"])


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str


DealsEnvelope = Union[DealsResponse, ErrorResponse]


class HealthResponse(BaseModel):
    ok: bool = True
