"""Subscription, subscription item and payment attempt API router tests."""

from uuid import uuid4

import pytest

from app.repositories.payment_attempt_repository import PaymentAttemptRepository
from app.repositories.subscription_item_repository import SubscriptionItemRepository
from app.schemas.payment_attempt import PaymentAttemptCreate
from app.schemas.subscription_item import SubscriptionItemCreate
from tests.conftest import make_organization, make_subscription, make_user


@pytest.fixture
def user(db_session):
    return make_user(db_session)


@pytest.fixture
def subscription(db_session, user):
    return make_subscription(db_session, user=user)


class TestSubscriptionApi:
    def test_create_for_user(self, authed_client, user):
        response = authed_client.post(
            "/v1/subscriptions/",
            json={
                "external_id": "sub_1",
                "subscriber_type": "user",
                "subscriber_user_id": str(user.id),
                "current_period_start": "2026-10-01T00:00:00Z",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "active"
        assert data["subscriber_user_id"] == str(user.id)
        assert data["subscriber_organization_id"] is None
        assert data["cancel_at_period_end"] is False

    def test_create_for_organization(self, authed_client, db_session):
        org = make_organization(db_session)
        response = authed_client.post(
            "/v1/subscriptions/",
            json={
                "external_id": "sub_1",
                "subscriber_type": "organization",
                "subscriber_organization_id": str(org.id),
            },
        )
        assert response.status_code == 201
        assert response.json()["subscriber_type"] == "organization"

    def test_subscriber_must_match_type(self, authed_client, user):
        response = authed_client.post(
            "/v1/subscriptions/",
            json={
                "external_id": "sub_1",
                "subscriber_type": "organization",
                "subscriber_user_id": str(user.id),
            },
        )
        assert response.status_code == 422

    def test_both_subscribers_rejected(self, authed_client, db_session, user):
        org = make_organization(db_session)
        response = authed_client.post(
            "/v1/subscriptions/",
            json={
                "external_id": "sub_1",
                "subscriber_type": "user",
                "subscriber_user_id": str(user.id),
                "subscriber_organization_id": str(org.id),
            },
        )
        assert response.status_code == 422

    def test_unknown_subscriber(self, authed_client):
        response = authed_client.post(
            "/v1/subscriptions/",
            json={
                "external_id": "sub_1",
                "subscriber_type": "user",
                "subscriber_user_id": str(uuid4()),
            },
        )
        assert response.status_code == 404

    def test_duplicate(self, authed_client, subscription, user):
        response = authed_client.post(
            "/v1/subscriptions/",
            json={
                "external_id": "sub_1",
                "subscriber_type": "user",
                "subscriber_user_id": str(user.id),
            },
        )
        assert response.status_code == 409

    def test_list_by_status(self, authed_client, db_session, user, subscription):
        make_subscription(db_session, "sub_2", user=user, status="past_due")

        response = authed_client.get("/v1/subscriptions/", params={"status": "past_due"})

        assert response.headers["X-Total-Count"] == "1"
        assert response.json()[0]["external_id"] == "sub_2"

    def test_update(self, authed_client, subscription):
        response = authed_client.patch(
            f"/v1/subscriptions/{subscription.id}",
            json={"status": "canceled", "cancel_at_period_end": True},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "canceled"
        assert response.json()["cancel_at_period_end"] is True

    def test_invalid_status(self, authed_client, subscription):
        response = authed_client.patch(
            f"/v1/subscriptions/{subscription.id}", json={"status": "paused"}
        )
        assert response.status_code == 422

    def test_delete_keeps_payment_history(self, authed_client, db_session, subscription):
        SubscriptionItemRepository(db_session).create(
            SubscriptionItemCreate(
                external_id="si_1", subscription_id=subscription.id, plan_id="plan_pro"
            )
        )
        attempt = PaymentAttemptRepository(db_session).create(
            PaymentAttemptCreate(
                external_id="pa_1",
                subscription_id=subscription.id,
                amount=2000,
                attempted_at="2026-10-01T00:00:00Z",
            )
        )

        assert authed_client.delete(f"/v1/subscriptions/{subscription.id}").status_code == 204

        assert authed_client.get("/v1/subscription_items/").json() == []
        remaining = authed_client.get(f"/v1/payment_attempts/{attempt.id}").json()
        assert remaining["subscription_id"] is None

    def test_not_found(self, authed_client):
        assert authed_client.get(f"/v1/subscriptions/{uuid4()}").status_code == 404
        assert authed_client.delete(f"/v1/subscriptions/{uuid4()}").status_code == 404


class TestSubscriptionItemApi:
    def test_create_and_list_under_subscription(self, authed_client, subscription):
        response = authed_client.post(
            "/v1/subscription_items/",
            json={
                "external_id": "si_1",
                "subscription_id": str(subscription.id),
                "plan_id": "plan_pro",
                "plan_name": "Pro",
                "unit_amount": 2000,
                "currency": "usd",
                "interval": "month",
            },
        )
        assert response.status_code == 201
        assert response.json()["quantity"] == 1
        assert response.json()["status"] == "active"

        listing = authed_client.get(f"/v1/subscriptions/{subscription.id}/items")
        assert listing.headers["X-Total-Count"] == "1"
        assert listing.json()[0]["plan_id"] == "plan_pro"

    def test_unknown_subscription(self, authed_client):
        response = authed_client.post(
            "/v1/subscription_items/",
            json={"external_id": "si_1", "subscription_id": str(uuid4()), "plan_id": "plan_pro"},
        )
        assert response.status_code == 404

    def test_invalid_interval(self, authed_client, subscription):
        response = authed_client.post(
            "/v1/subscription_items/",
            json={
                "external_id": "si_1",
                "subscription_id": str(subscription.id),
                "plan_id": "plan_pro",
                "interval": "fortnight",
            },
        )
        assert response.status_code == 422

    def test_update_and_delete(self, authed_client, db_session, subscription):
        item = SubscriptionItemRepository(db_session).create(
            SubscriptionItemCreate(
                external_id="si_1", subscription_id=subscription.id, plan_id="plan_pro"
            )
        )
        response = authed_client.patch(
            f"/v1/subscription_items/{item.id}", json={"quantity": 3, "status": "canceled"}
        )
        assert response.json()["quantity"] == 3
        assert response.json()["status"] == "canceled"

        assert authed_client.delete(f"/v1/subscription_items/{item.id}").status_code == 204
        assert authed_client.get(f"/v1/subscription_items/{item.id}").status_code == 404


class TestPaymentAttemptApi:
    def test_create_unlinked(self, authed_client):
        response = authed_client.post(
            "/v1/payment_attempts/",
            json={
                "external_id": "pa_1",
                "amount": 2000,
                "status": "failed",
                "failure_code": "card_declined",
                "attempted_at": "2026-10-01T00:00:00Z",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["subscription_id"] is None
        assert data["currency"] == "usd"
        assert data["status"] == "failed"

    def test_create_unknown_subscription(self, authed_client):
        response = authed_client.post(
            "/v1/payment_attempts/",
            json={
                "external_id": "pa_1",
                "subscription_id": str(uuid4()),
                "attempted_at": "2026-10-01T00:00:00Z",
            },
        )
        assert response.status_code == 404

    def test_list_filters(self, authed_client, db_session, subscription):
        repo = PaymentAttemptRepository(db_session)
        for i, status in enumerate(["succeeded", "failed", "failed"]):
            repo.create(
                PaymentAttemptCreate(
                    external_id=f"pa_{i}",
                    subscription_id=subscription.id if i else None,
                    status=status,
                    attempted_at=f"2026-10-0{i + 1}T00:00:00Z",
                )
            )

        failed = authed_client.get("/v1/payment_attempts/", params={"status": "failed"})
        linked = authed_client.get(f"/v1/subscriptions/{subscription.id}/payment_attempts")

        assert failed.headers["X-Total-Count"] == "2"
        assert linked.headers["X-Total-Count"] == "2"
        assert {a["external_id"] for a in linked.json()} == {"pa_1", "pa_2"}

    def test_update(self, authed_client, db_session):
        attempt = PaymentAttemptRepository(db_session).create(
            PaymentAttemptCreate(external_id="pa_1", attempted_at="2026-10-01T00:00:00Z")
        )
        response = authed_client.patch(
            f"/v1/payment_attempts/{attempt.id}", json={"status": "succeeded", "charge_id": "ch_1"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "succeeded"
        assert response.json()["charge_id"] == "ch_1"

    def test_requires_admin(self, client):
        assert client.get("/v1/payment_attempts/").status_code == 401
