from urllib.parse import urljoin, urlparse

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.services.email_verification import EmailVerificationService

router = APIRouter()


def sign_in_url(request: Request, settings: Settings) -> str:
    """Absolute sign-in URL; relative settings resolve against the request URL."""
    target = settings.CLERK_SIGN_IN_URL
    if urlparse(target).scheme:
        return target
    return urljoin(str(request.url), target)


@router.get(
    "/verify-email",
    response_class=RedirectResponse,
    summary="Confirm an email verification link",
    responses={307: {"description": "Redirect to the sign-in page"}},
)
async def verify_email(
    request: Request,
    token: str | None = Query(default=None),
    email: str | None = Query(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Consume a verification token, then redirect to sign-in whatever the outcome."""
    await EmailVerificationService(db, settings).confirm(token, email)
    return RedirectResponse(url=sign_in_url(request, settings))
