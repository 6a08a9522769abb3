from typing import Optional

from fastapi import APIRouter, Depends, Request

from shared.security import get_issuer, get_presented_token
from shared.security.jwt_handler import CredentialIssuer

from .schemas import ContentResponse
from .service import ContentGate

router = APIRouter(tags=["Content"])


def get_content_gate(request: Request, issuer: CredentialIssuer = Depends(get_issuer)) -> ContentGate:
    return ContentGate(issuer, request.app.state.content_store)


@router.get("/content", response_model=ContentResponse)
async def get_content(
    token: Optional[str] = Depends(get_presented_token),
    gate: ContentGate = Depends(get_content_gate),
):
    return ContentResponse(html=await gate.get_content(token))
