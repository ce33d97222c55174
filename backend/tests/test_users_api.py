"""User API router tests."""

from uuid import uuid4

from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.schemas.organization_membership import OrganizationMembershipCreate
from tests.conftest import make_organization, make_subscription, make_user

USER_PAYLOAD = {
    "external_id": "user_1",
    "email": "jane@example.com",
    "first_name": "Jane",
    "last_name": "Doe",
    "public_metadata": {"plan": "pro"},
}


class TestListUsers:
    def test_empty(self, client):
        response = client.get("/v1/users/")
        assert response.status_code == 200
        assert response.json() == []
        assert response.headers["X-Total-Count"] == "0"

    def test_pagination_and_total(self, client, db_session):
        for i in range(3):
            make_user(db_session, f"user_{i}", f"user{i}@example.com")

        response = client.get("/v1/users/", params={"skip": 1, "limit": 1})

        assert response.status_code == 200
        assert len(response.json()) == 1
        assert response.headers["X-Total-Count"] == "3"

    def test_order_by_email(self, client, db_session):
        make_user(db_session, "user_b", "bob@example.com")
        make_user(db_session, "user_a", "alice@example.com")

        response = client.get("/v1/users/", params={"order_by": "email:asc"})

        assert [u["email"] for u in response.json()] == ["alice@example.com", "bob@example.com"]

    def test_invalid_limit(self, client):
        assert client.get("/v1/users/", params={"limit": 0}).status_code == 422


class TestUserCrud:
    def test_create(self, authed_client):
        response = authed_client.post("/v1/users/", json=USER_PAYLOAD)

        assert response.status_code == 201
        data = response.json()
        assert data["external_id"] == "user_1"
        assert data["email"] == "jane@example.com"
        assert data["email_verified"] is False
        assert data["public_metadata"] == {"plan": "pro"}

    def test_create_duplicate_external_id(self, authed_client):
        authed_client.post("/v1/users/", json=USER_PAYLOAD)
        response = authed_client.post(
            "/v1/users/", json={**USER_PAYLOAD, "email": "other@example.com"}
        )
        assert response.status_code == 409

    def test_create_duplicate_email(self, authed_client):
        authed_client.post("/v1/users/", json=USER_PAYLOAD)
        response = authed_client.post("/v1/users/", json={**USER_PAYLOAD, "external_id": "user_2"})
        assert response.status_code == 409
        assert response.json()["detail"] == "User with this email already exists"

    def test_create_invalid_email(self, authed_client):
        response = authed_client.post("/v1/users/", json={**USER_PAYLOAD, "email": "nope"})
        assert response.status_code == 422

    def test_get(self, client, db_session):
        user = make_user(db_session)
        response = client.get(f"/v1/users/{user.id}")
        assert response.status_code == 200
        assert response.json()["id"] == str(user.id)

    def test_get_not_found(self, client):
        assert client.get(f"/v1/users/{uuid4()}").status_code == 404

    def test_update(self, authed_client, db_session):
        user = make_user(db_session)
        response = authed_client.patch(f"/v1/users/{user.id}", json={"first_name": "Janet"})
        assert response.status_code == 200
        assert response.json()["first_name"] == "Janet"
        assert response.json()["email"] == "jane@example.com"

    def test_update_email_conflict(self, authed_client, db_session):
        user = make_user(db_session)
        make_user(db_session, "user_2", "taken@example.com")
        response = authed_client.patch(f"/v1/users/{user.id}", json={"email": "taken@example.com"})
        assert response.status_code == 409

    def test_update_own_email_is_allowed(self, authed_client, db_session):
        user = make_user(db_session)
        response = authed_client.patch(f"/v1/users/{user.id}", json={"email": "jane@example.com"})
        assert response.status_code == 200

    def test_update_not_found(self, authed_client):
        response = authed_client.patch(f"/v1/users/{uuid4()}", json={"first_name": "X"})
        assert response.status_code == 404

    def test_delete_cascades(self, authed_client, db_session):
        user = make_user(db_session)
        org = make_organization(db_session)
        OrganizationMembershipRepository(db_session).create(
            OrganizationMembershipCreate(
                external_id="orgmem_1", organization_id=org.id, user_id=user.id
            )
        )
        make_subscription(db_session, user=user)

        response = authed_client.delete(f"/v1/users/{user.id}")

        assert response.status_code == 204
        assert authed_client.get(f"/v1/users/{user.id}").status_code == 404
        assert authed_client.get("/v1/organization_memberships/").json() == []
        assert authed_client.get("/v1/subscriptions/").json() == []

    def test_delete_not_found(self, authed_client):
        assert authed_client.delete(f"/v1/users/{uuid4()}").status_code == 404


class TestUserRelationships:
    def test_memberships(self, authed_client, db_session):
        user = make_user(db_session)
        org = make_organization(db_session)
        OrganizationMembershipRepository(db_session).create(
            OrganizationMembershipCreate(
                external_id="orgmem_1", organization_id=org.id, user_id=user.id, role="admin"
            )
        )

        response = authed_client.get(f"/v1/users/{user.id}/memberships")

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        assert response.json()[0]["organization_id"] == str(org.id)
        assert response.json()[0]["role"] == "admin"

    def test_memberships_require_admin(self, client, db_session):
        user = make_user(db_session)
        assert client.get(f"/v1/users/{user.id}/memberships").status_code == 401

    def test_subscriptions(self, authed_client, db_session):
        user = make_user(db_session)
        make_subscription(db_session, user=user)

        response = authed_client.get(f"/v1/users/{user.id}/subscriptions")

        assert response.status_code == 200
        assert [s["external_id"] for s in response.json()] == ["sub_1"]
        assert response.json()[0]["subscriber_type"] == "user"

    def test_unknown_user(self, authed_client):
        assert authed_client.get(f"/v1/users/{uuid4()}/subscriptions").status_code == 404
