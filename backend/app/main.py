import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from app.core.config import settings
from app.routers import (
    admins,
    auth,
    clerk_webhooks,
    organization_memberships,
    organizations,
    payment_attempts,
    subscription_items,
    subscriptions,
    users,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

OPENAPI_TAGS = [
    {"name": "Webhooks", "description": "Svix-signed Clerk webhook ingestion."},
    {"name": "Auth", "description": "Email verification links."},
    {"name": "Users", "description": "Users mirrored from Clerk."},
    {"name": "Organizations", "description": "Organizations mirrored from Clerk."},
    {"name": "Memberships", "description": "Organization memberships (admin only)."},
    {"name": "Subscriptions", "description": "Billing subscriptions (admin only)."},
    {"name": "Subscription Items", "description": "Subscription line items (admin only)."},
    {"name": "Payment Attempts", "description": "Payment attempts (admin only)."},
    {"name": "Admins", "description": "Administrative principals and their API keys."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Mirrors Clerk identity and billing state into a local database via "
        "webhooks and exposes admin-gated access to the mirrored data."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(clerk_webhooks.router, prefix="/api/webhooks", tags=["Webhooks"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/v1/users", tags=["Users"])
app.include_router(
    organizations.router,
    prefix="/v1/organizations",
    tags=["Organizations"],
)
app.include_router(
    organization_memberships.router,
    prefix="/v1/organization_memberships",
    tags=["Memberships"],
)
app.include_router(subscriptions.router, prefix="/v1/subscriptions", tags=["Subscriptions"])
app.include_router(
    subscription_items.router,
    prefix="/v1/subscription_items",
    tags=["Subscription Items"],
)
app.include_router(
    payment_attempts.router,
    prefix="/v1/payment_attempts",
    tags=["Payment Attempts"],
)
app.include_router(admins.router, prefix="/v1/admins", tags=["Admins"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "status": "running",
    }
