"""Day model — calendar day boundaries over the block table."""

import uuid
import datetime as dt

from sqlalchemy import BigInteger, Date, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chainstats.models.base import Base
from chainstats.models.block import Block


class Day(Base):
    __tablename__ = "days"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    date: Mapped[dt.date] = mapped_column(Date, unique=True, nullable=False)
    first_block_height: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # Final block of a closed day; null while the day is still open
    last_block_height: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    last_block_height_yet: Mapped[int] = mapped_column(BigInteger, nullable=False)

    last_block: Mapped[Block | None] = relationship(
        Block,
        primaryjoin="foreign(Day.last_block_height) == Block.height",
        viewonly=True,
        lazy="raise",
    )
