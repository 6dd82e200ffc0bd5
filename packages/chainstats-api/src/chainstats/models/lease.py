"""Lease model — deployment lease lifetime in block heights."""

import uuid

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from chainstats.models.base import Base


class Lease(Base):
    __tablename__ = "leases"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    provider_address: Mapped[str] = mapped_column(String(64), nullable=False)
    created_height: Mapped[int] = mapped_column(BigInteger, nullable=False)
    closed_height: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    # Height at which escrow runs dry if the lease is never closed explicitly
    predicted_closed_height: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        Index("ix_leases_provider_created", "provider_address", "created_height"),
    )
