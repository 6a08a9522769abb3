from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

ORDER_CREATE_LIMIT = "30/minute"


def client_address(request: Request) -> str:
    """
    Key function for SlowAPI.
    Order creation is anonymous, so the only stable key is the peer address.
    Client-supplied forwarding headers are not trusted here; behind a proxy,
    uvicorn rewrites the peer from X-Forwarded-For for FORWARDED_ALLOW_IPS only.
    """
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=client_address)
