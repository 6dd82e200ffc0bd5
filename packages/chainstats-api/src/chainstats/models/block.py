"""Block model — one ledger snapshot of cumulative and instantaneous counters."""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chainstats.models.base import Base


class Block(Base):
    """A processed block as written by the chain indexer.

    ``total_*`` columns are cumulative and never decrease with height.
    ``active_*`` columns are gauges sampled at this block.
    """

    __tablename__ = "blocks"

    height: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    day_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("days.id"), nullable=True
    )
    is_processed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Cumulative
    total_lease_count: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    total_uakt_spent: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # Instantaneous
    active_lease_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active_cpu: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    active_gpu: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    active_memory: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    active_ephemeral_storage: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    active_persistent_storage: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    __table_args__ = (
        Index("ix_blocks_timestamp", "timestamp"),
        Index("ix_blocks_processed_height", "is_processed", "height"),
    )
