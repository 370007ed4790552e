# src/scan_kiosk/models/token.py
"""Models backing the rolling token ledger."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from scan_kiosk.db.session import Base
from scan_kiosk.db.time import utcnow

TOKEN_POINTER_ID = 1


class TokenPointer(Base):
    """Single-row holder of the token currently advertised by the poster."""

    __tablename__ = "token_pointer"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=TOKEN_POINTER_ID)
    current_token: Mapped[int] = mapped_column(BigInteger, nullable=False)


class ConsumedToken(Base):
    """Record indicating that a token has already been redeemed.

    The primary key on ``token`` is what makes consumption single-use:
    a second insert for the same value fails.
    """

    __tablename__ = "consumed_token"

    token: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    consumed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
