import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from shared.errors import Unauthenticated

INVALID_TOKEN_MESSAGE = "invalid or expired token"


@dataclass(frozen=True)
class Credential:
    """Verified claim set of a content access token."""

    post_id: str
    trade_no: str
    issued_at: datetime
    expires_at: datetime


class CredentialIssuer:
    """
    Mints and verifies bearer tokens binding one content item to one order.

    Verification is a pure function of the token and the shared secret; it
    never touches the order store.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(hours=24)):
        if not secret:
            raise ValueError("signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl

    def issue(self, post_id: str, trade_no: str, issued_at: Optional[datetime] = None) -> str:
        now = issued_at or datetime.now(timezone.utc)
        claims = {
            "post_id": post_id,
            "trade_no": trade_no,
            "iat": now,
            "exp": now + self.ttl,
            # Keeps two tokens minted for the same order within one second distinct
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Credential:
        """Decodes and verifies the JWT. Raises Unauthenticated if invalid/expired."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            raise Unauthenticated(INVALID_TOKEN_MESSAGE)

        post_id = payload.get("post_id")
        trade_no = payload.get("trade_no")
        iat = payload.get("iat")
        exp = payload.get("exp")
        if not post_id or not trade_no or iat is None or exp is None:
            raise Unauthenticated(INVALID_TOKEN_MESSAGE)

        return Credential(
            post_id=str(post_id),
            trade_no=str(trade_no),
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
