"""Provider snapshot model — periodic capacity probe of one provider."""

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from chainstats.models.base import Base


class ProviderSnapshot(Base):
    __tablename__ = "provider_snapshots"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner: Mapped[str] = mapped_column(String(64), nullable=False)
    check_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_online: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    active_cpu: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    pending_cpu: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    available_cpu: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    active_gpu: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    pending_gpu: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    available_gpu: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    active_memory: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    pending_memory: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    available_memory: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    active_storage: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    pending_storage: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    available_storage: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    __table_args__ = (
        Index("ix_provider_snapshots_owner_check_date", "owner", "check_date"),
    )
