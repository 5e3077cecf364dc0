"""
Armory API — Potion Request/Response Schemas
==============================================

Same pattern as the sword schemas. `name` is required on create; on update it
may be omitted, and an explicit null is left for the database's NOT NULL
constraint to reject.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from armory.schemas.common import StorageInt


class PotionCreate(BaseModel):
    """Body of POST /api/potions."""

    name: str = Field(min_length=1, description="Display name of the potion")
    effect: Optional[str] = None
    potency: Optional[StorageInt] = None
    is_poisonous: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class PotionUpdate(BaseModel):
    """Body of PUT /api/potions/{id}."""

    name: Optional[str] = None
    effect: Optional[str] = None
    potency: Optional[StorageInt] = None
    is_poisonous: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class PotionRead(BaseModel):
    id: StorageInt
    name: str
    effect: Optional[str] = None
    potency: Optional[StorageInt] = None
    is_poisonous: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)
