from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class PaymentNotificationModel(Base):
    """Processed-notification ledger; a row here means its effect is already applied"""

    __tablename__ = 'payment_notification'

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    entry_type: Mapped[str] = mapped_column('type', String(20), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
