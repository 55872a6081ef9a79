"""FastAPI dependencies shared by the routers."""

from typing import Annotated, Optional

from fastapi import Cookie, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.session import get_db
from app.models.user import User
from app.services.auth_gateway import AuthGateway
from app.services.credential_store import CredentialStore
from app.services.email_service import get_email_service
from app.services.storage_service import get_storage_service

settings = get_settings()

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_auth_gateway(db: DbSession) -> AuthGateway:
    """Build a gateway bound to this request's session."""
    return AuthGateway(
        store=CredentialStore(db),
        mailer=get_email_service(),
        storage=get_storage_service(),
    )


Gateway = Annotated[AuthGateway, Depends(get_auth_gateway)]

AuthTokenCookie = Annotated[Optional[str], Cookie(alias=settings.cookie_name)]


async def get_current_user(gateway: Gateway, auth_token: AuthTokenCookie = None) -> User:
    """Resolve the cookie token to a verified user or fail 401."""
    return await gateway.authenticate(auth_token)


CurrentUser = Annotated[User, Depends(get_current_user)]
