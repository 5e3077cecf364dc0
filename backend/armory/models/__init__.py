"""
Armory API — ORM Models
=========================

Importing this package registers every resource table with Base.metadata.
"""

from armory.models.potion import Potion
from armory.models.sword import Sword

__all__ = ["Potion", "Sword"]
