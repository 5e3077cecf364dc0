"""
Armory API — Sword Request/Response Schemas
=============================================

What:  Pydantic models for the sword API contract.
How:   Request bodies (JSON or form) are decoded into a dict and validated
       against SwordCreate / SwordUpdate before they reach the gateway.
       Form values arrive as strings; Pydantic's lax mode coerces "50" to
       50 and "true" to True. Integers are bounded to the 32-bit column
       range, and JSON booleans are not accepted as integers.

`extra="forbid"` rejects unknown keys, including a client-supplied `id`.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from armory.schemas.common import StorageInt


class SwordFields(BaseModel):
    """Writable sword fields. Every field is optional on create and update."""

    type: Optional[str] = Field(default=None, description="Kind of blade, e.g. katana")
    is_magical: Optional[bool] = Field(default=None, description="Whether the sword is enchanted")
    attack: Optional[StorageInt] = Field(default=None, description="Base attack rating")
    sp_attack: Optional[StorageInt] = Field(default=None, description="Special attack rating")

    model_config = ConfigDict(extra="forbid")


class SwordCreate(SwordFields):
    """Body of POST /api/swords."""


class SwordUpdate(SwordFields):
    """Body of PUT /api/swords/{id}. Only the keys present are merged."""


class SwordRead(BaseModel):
    """A stored sword, as returned by every sword endpoint."""

    id: StorageInt = Field(description="Storage-assigned identifier")
    type: Optional[str] = None
    is_magical: Optional[bool] = None
    attack: Optional[StorageInt] = None
    sp_attack: Optional[StorageInt] = None

    model_config = ConfigDict(from_attributes=True)
