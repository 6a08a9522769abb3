"""
The content gate.

The item served is always the post_id inside the verified credential. No
request parameter takes part in choosing it, so a credential for one item
can never be pointed at another.
"""
from typing import Optional

import structlog

from shared.errors import NotFound, Unauthenticated
from shared.observability import paywall_content_access_total
from shared.security.jwt_handler import CredentialIssuer

from .storage import ContentStore

logger = structlog.get_logger(__name__)

NO_TOKEN_MESSAGE = "no token"
POST_NOT_FOUND_MESSAGE = "post not found"


class ContentGate:

    def __init__(self, issuer: CredentialIssuer, store: ContentStore):
        self.issuer = issuer
        self.store = store

    async def get_content(self, token: Optional[str]) -> str:
        if not token:
            paywall_content_access_total.labels(result="no_token").inc()
            raise Unauthenticated(NO_TOKEN_MESSAGE)

        try:
            credential = self.issuer.verify(token)
        except Unauthenticated:
            paywall_content_access_total.labels(result="invalid_token").inc()
            logger.warning("content_token_rejected")
            raise

        html = await self.store.get(credential.post_id)
        if html is None:
            paywall_content_access_total.labels(result="not_found").inc()
            raise NotFound(POST_NOT_FOUND_MESSAGE)

        paywall_content_access_total.labels(result="granted").inc()
        logger.info("content_served", post_id=credential.post_id, trade_no=credential.trade_no)
        return html
