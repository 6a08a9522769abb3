from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExchangeResult:
    redirect_url: str
    token: Optional[str] = None  # None means: redirect to the failure page, set no cookie

    @property
    def succeeded(self) -> bool:
        return self.token is not None
