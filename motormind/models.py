from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class VehicleType(str, Enum):
    BIKE = "BIKE"
    SCOOTER = "SCOOTER"
    MOPED = "MOPED"
    ELECTRIC = "ELECTRIC"


class AgentRequest(BaseModel):
    """Request payload for the resolution endpoint."""
    message: str


class VehicleCreate(BaseModel):
    """Body for creating an inventory item."""
    model: str
    location: str
    stock: int = Field(ge=0)
    price: float
    color: str
    type: VehicleType


class VehicleUpdate(BaseModel):
    """Body for replacing an inventory item's mutable fields."""
    model: str
    location: str
    stock: int = Field(ge=0)
    price: float
    color: str


class BuyRequest(BaseModel):
    """Body for a manual single-unit stock decrement."""
    id: str
