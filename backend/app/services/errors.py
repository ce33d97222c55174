"""Errors raised while ingesting Clerk webhooks.

Routers translate these into HTTP status codes: authentication and validation
failures become 400, store failures become 500.
"""


class ClerkWebhookError(Exception):
    """Base class for webhook ingestion failures."""

    status_code = 500


class AuthenticationError(ClerkWebhookError):
    """Missing Svix headers, a bad signature or an unreadable body."""

    status_code = 400


class ValidationError(ClerkWebhookError):
    """A verified payload lacks data the mirror requires."""

    status_code = 400


class StoreError(ClerkWebhookError):
    """The database rejected a write for a reason other than a benign duplicate."""

    status_code = 500
