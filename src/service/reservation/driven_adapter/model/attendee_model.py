from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class AttendeeModel(Base):
    __tablename__ = 'event_attendee'

    event_id: Mapped[int] = mapped_column(Integer, ForeignKey('event.id'), primary_key=True)
    buyer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    order_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_event_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
