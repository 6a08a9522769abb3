from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base

STATUS_PENDING = "PENDING"
STATUS_PAID = "PAID"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trade_no = Column(String(64), unique=True, nullable=False, index=True)
    post_id = Column(String(255), nullable=False)
    amount = Column(Float, nullable=True)  # informational only, never a capability
    status = Column(String(16), nullable=False, default=STATUS_PENDING)  # PENDING -> PAID, never back
    token = Column(Text, nullable=True)  # set iff status == PAID
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    paid_at = Column(DateTime(timezone=True), nullable=True)
