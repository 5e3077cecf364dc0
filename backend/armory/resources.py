"""
Armory API — Resource Registry
================================

What:  Declares every resource exposed over CRUD endpoints.
How:   A Resource bundles the plural URL name with its ORM model and the
       Pydantic schemas for create, update and read, plus the singular name
       used in route summaries and log lines. The app factory mounts
       one router per entry at /api/<name>.

Adding a resource means adding a model, its schemas and one entry here.
"""

from dataclasses import dataclass
from typing import Tuple, Type

from pydantic import BaseModel

from armory.database import Base
from armory.models import Potion, Sword
from armory.schemas.potion import PotionCreate, PotionRead, PotionUpdate
from armory.schemas.sword import SwordCreate, SwordRead, SwordUpdate


@dataclass(frozen=True)
class Resource:
    """One table exposed as a CRUD resource."""

    name: str
    singular: str
    model: Type[Base]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    read_schema: Type[BaseModel]

    @property
    def prefix(self) -> str:
        return f"/api/{self.name}"

    @property
    def tag(self) -> str:
        return self.name.capitalize()


SWORDS = Resource(
    name="swords",
    singular="sword",
    model=Sword,
    create_schema=SwordCreate,
    update_schema=SwordUpdate,
    read_schema=SwordRead,
)

POTIONS = Resource(
    name="potions",
    singular="potion",
    model=Potion,
    create_schema=PotionCreate,
    update_schema=PotionUpdate,
    read_schema=PotionRead,
)

RESOURCES: Tuple[Resource, ...] = (SWORDS, POTIONS)
