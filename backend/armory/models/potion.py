"""
Armory API — Potion SQLAlchemy Model
======================================

What:  ORM model for the `potions` table.

Unlike swords, a potion must have a name: the column is NOT NULL, so an
update that sets `name` to null is rejected by the database and surfaces as
a 422.
"""

from typing import Optional

from sqlalchemy import Boolean, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from armory.database import Base


class Potion(Base):
    """A potion in the armory."""

    __tablename__ = "potions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    effect: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="What drinking it does, e.g. heal, invisibility",
    )

    potency: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    is_poisonous: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    def __repr__(self) -> str:
        return f"<Potion(id={self.id}, name='{self.name}')>"
