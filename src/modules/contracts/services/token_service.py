import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from config import settings
from modules.contracts.models.access_token import GuestAccessToken

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32  # 256 bits of entropy


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def signing_url(token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/guest-sign/{token}"


class TokenIssuer:
    """
    Mints the guest access token for a contract.

    The token is only added to the session; committing it is left to the
    caller so it lands in the same transaction as the SENT transition.
    """

    def __init__(self, ttl: Optional[timedelta] = None):
        self.ttl = ttl if ttl is not None else timedelta(days=settings.GUEST_TOKEN_TTL_DAYS)

    def issue(self, session: Session, contract_id: str, now: Optional[datetime] = None) -> GuestAccessToken:
        now = now or datetime.utcnow()
        access_token = GuestAccessToken(
            token=generate_token(),
            contract_id=contract_id,
            expires_at=now + self.ttl,
            consumed=False,
            created_at=now,
        )
        session.add(access_token)
        logger.debug("Issued guest token %s... for contract %s", access_token.token[:8], contract_id)
        return access_token
