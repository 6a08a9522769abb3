"""
Payment notification boundary.

The payment channel does not use fixed field names, so each logical field
has an ordered list of candidate keys. They are resolved once, here, into a
ResolvedNotification; nothing downstream ever looks at the raw fields.
"""
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel

from shared.errors import InvalidInput

TRADE_NO_ALIASES: Sequence[str] = ("trade_no", "out_trade_no", "transaction_id", "tradeNo")
POST_ID_ALIASES: Sequence[str] = ("post_id", "post", "attach")
AMOUNT_ALIASES: Sequence[str] = ("amount", "fee", "total_fee")


def first_present(fields: Mapping[str, Any], aliases: Sequence[str]) -> Optional[str]:
    for key in aliases:
        value = fields.get(key)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return value
    return None


def parse_amount(raw: Optional[str]) -> Optional[float]:
    # Advisory only: an unreadable amount is dropped, not rejected
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


class ResolvedNotification(BaseModel):
    trade_no: str
    post_id: str
    amount: Optional[float] = None

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "ResolvedNotification":
        trade_no = first_present(fields, TRADE_NO_ALIASES)
        post_id = first_present(fields, POST_ID_ALIASES)
        if not trade_no or not post_id:
            raise InvalidInput(
                "missing required fields",
                field="trade_no" if not trade_no else "post_id",
            )
        return cls(
            trade_no=trade_no,
            post_id=post_id,
            amount=parse_amount(first_present(fields, AMOUNT_ALIASES)),
        )


class PaymentStatus(BaseModel):
    paid: bool
    token: Optional[str] = None
    post_id: Optional[str] = None
