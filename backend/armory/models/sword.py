"""
Armory API — Sword SQLAlchemy Model
=====================================

What:  ORM model for the `swords` table.
How:   Inherits from the shared DeclarativeBase; Alembic revision 001 and
       create_schema both build the table from this definition.

Table Design:
    - id: serial integer primary key, assigned by the database on insert
    - every other column is nullable; a sword may be created with any
      subset of its fields
"""

from typing import Optional

from sqlalchemy import Boolean, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from armory.database import Base


class Sword(Base):
    """
    A sword in the armory.

    Lifecycle:
        1. Created by POST /api/swords (id assigned by storage)
        2. Fields merged by PUT /api/swords/{id}; id never changes
        3. Removed by DELETE /api/swords/{id}
    """

    __tablename__ = "swords"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    type: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Kind of blade, e.g. katana, claymore",
    )

    is_magical: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    attack: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    sp_attack: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Special attack rating",
    )

    def __repr__(self) -> str:
        return f"<Sword(id={self.id}, type='{self.type}')>"
