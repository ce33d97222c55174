"""Email verification links: issue a single-use token, then confirm it."""

import logging
import secrets
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.email_service import EmailService

logger = logging.getLogger(__name__)


class EmailVerificationService:
    def __init__(
        self,
        db: Session,
        settings: Settings,
        email_service: EmailService | None = None,
    ):
        self.db = db
        self.settings = settings
        self.email_service = email_service or EmailService(settings)
        self.user_repo = UserRepository(db)

    def verification_url(self, token: str, email: str) -> str:
        query = urlencode({"token": token, "email": email})
        return f"{self.settings.APP_BASE_URL.rstrip('/')}/api/auth/verify-email?{query}"

    async def issue(self, user: User) -> str:
        """Store a fresh token for ``user`` and email them the verification link.

        Any previously issued token is replaced. Returns the new token.
        """
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(UTC) + timedelta(
            hours=self.settings.EMAIL_VERIFICATION_TTL_HOURS
        )
        self.user_repo.set_verification_token(user, token, expires_at)
        await self.email_service.send_verification_email(
            user, self.verification_url(token, str(user.email))
        )
        logger.info("Verification email issued for user %s", user.id)
        return token

    async def confirm(self, token: str | None, email: str | None) -> bool:
        """Consume a verification token.

        Returns True when the token matched an unexpired one for ``email``.
        Failures of any kind are logged and reported as False.
        """
        if not token or not email:
            return False

        try:
            now = datetime.now(UTC)
            user = self.user_repo.get_by_verification_token(email, token, now)
            if user is None:
                logger.info("Invalid or expired verification token for %s", email)
                return False
            self.user_repo.mark_email_verified(user, now)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error verifying email for %s", email)
            return False

        try:
            await self.email_service.send_welcome_email(user)
        except Exception:
            logger.exception("Failed to send welcome email to %s", email)
        logger.info("Email verified for user %s", user.id)
        return True
