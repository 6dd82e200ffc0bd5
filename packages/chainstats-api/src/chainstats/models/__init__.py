"""SQLAlchemy ORM models."""

from chainstats.models.base import Base
from chainstats.models.block import Block
from chainstats.models.day import Day
from chainstats.models.lease import Lease
from chainstats.models.provider_snapshot import ProviderSnapshot

__all__ = [
    "Base",
    "Block",
    "Day",
    "Lease",
    "ProviderSnapshot",
]
