"""Services for business logic."""

from app.services.auth_gateway import AuthGateway
from app.services.credential_store import CredentialStore
from app.services.otp_service import OtpService
from app.services.session_service import SessionService

__all__ = ["AuthGateway", "CredentialStore", "OtpService", "SessionService"]
