from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


class OrderCreate(BaseModel):
    # Validated by the lifecycle manager so a missing id yields a field-level 400
    post_id: Optional[Union[str, int]] = None
    amount: Optional[float] = None


class OrderCreated(BaseModel):
    ok: bool = True
    trade_no: str


class OrderSummary(BaseModel):
    trade_no: str
    post_id: str
    amount: Optional[float]
    status: str
    created_at: Optional[datetime]
    paid_at: Optional[datetime]

    class Config:
        from_attributes = True
