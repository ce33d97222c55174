"""Organization API router tests."""

import uuid

from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.schemas.organization_membership import OrganizationMembershipCreate
from tests.conftest import make_organization, make_subscription, make_user

NONEXISTENT_ORG_ID = uuid.UUID("99999999-9999-9999-9999-999999999999")

ORG_PAYLOAD = {
    "external_id": "org_1",
    "name": "Acme",
    "slug": "acme",
    "public_metadata": {"industry": "widgets"},
    "private_metadata": {"tier": "gold"},
}


class TestPrivateMetadata:
    def test_hidden_from_anonymous_callers(self, client, db_session):
        org = make_organization(db_session, private_metadata={"tier": "gold"})

        detail = client.get(f"/v1/organizations/{org.id}").json()
        listing = client.get("/v1/organizations/").json()

        assert detail["private_metadata"] is None
        assert listing[0]["private_metadata"] is None

    def test_visible_to_admins(self, authed_client, db_session):
        org = make_organization(db_session, private_metadata={"tier": "gold"})

        detail = authed_client.get(f"/v1/organizations/{org.id}").json()
        listing = authed_client.get("/v1/organizations/").json()

        assert detail["private_metadata"] == {"tier": "gold"}
        assert listing[0]["private_metadata"] == {"tier": "gold"}

    def test_public_metadata_always_visible(self, client, db_session):
        org = make_organization(db_session, public_metadata={"industry": "widgets"})
        assert client.get(f"/v1/organizations/{org.id}").json()["public_metadata"] == {
            "industry": "widgets"
        }


class TestOrganizationCrud:
    def test_list_total(self, client, db_session):
        make_organization(db_session, "org_1", "Acme", slug="acme")
        make_organization(db_session, "org_2", "Globex", slug="globex")

        response = client.get("/v1/organizations/", params={"order_by": "name:asc"})

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        assert [o["name"] for o in response.json()] == ["Acme", "Globex"]

    def test_create(self, authed_client, db_session):
        creator = make_user(db_session)
        response = authed_client.post(
            "/v1/organizations/", json={**ORG_PAYLOAD, "created_by_id": str(creator.id)}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "acme"
        assert data["created_by_id"] == str(creator.id)
        assert data["private_metadata"] == {"tier": "gold"}

    def test_create_requires_admin(self, client):
        assert client.post("/v1/organizations/", json=ORG_PAYLOAD).status_code == 401

    def test_create_duplicate_external_id(self, authed_client):
        authed_client.post("/v1/organizations/", json=ORG_PAYLOAD)
        response = authed_client.post("/v1/organizations/", json={**ORG_PAYLOAD, "slug": "other"})
        assert response.status_code == 409

    def test_create_duplicate_slug(self, authed_client):
        authed_client.post("/v1/organizations/", json=ORG_PAYLOAD)
        response = authed_client.post(
            "/v1/organizations/", json={**ORG_PAYLOAD, "external_id": "org_2"}
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Organization with this slug already exists"

    def test_update(self, authed_client, db_session):
        org = make_organization(db_session, slug="acme")
        response = authed_client.patch(
            f"/v1/organizations/{org.id}", json={"name": "Acme Inc", "max_allowed_memberships": 10}
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Acme Inc"
        assert response.json()["max_allowed_memberships"] == 10
        assert response.json()["slug"] == "acme"

    def test_update_slug_conflict(self, authed_client, db_session):
        org = make_organization(db_session, "org_1", "Acme", slug="acme")
        make_organization(db_session, "org_2", "Globex", slug="globex")
        response = authed_client.patch(f"/v1/organizations/{org.id}", json={"slug": "globex"})
        assert response.status_code == 409

    def test_update_not_found(self, authed_client):
        response = authed_client.patch(
            f"/v1/organizations/{NONEXISTENT_ORG_ID}", json={"name": "X"}
        )
        assert response.status_code == 404

    def test_get_not_found(self, client):
        assert client.get(f"/v1/organizations/{NONEXISTENT_ORG_ID}").status_code == 404

    def test_delete_cascades(self, authed_client, db_session):
        user = make_user(db_session)
        org = make_organization(db_session)
        OrganizationMembershipRepository(db_session).create(
            OrganizationMembershipCreate(
                external_id="orgmem_1", organization_id=org.id, user_id=user.id
            )
        )
        make_subscription(db_session, organization=org)

        response = authed_client.delete(f"/v1/organizations/{org.id}")

        assert response.status_code == 204
        assert authed_client.get("/v1/organization_memberships/").json() == []
        assert authed_client.get("/v1/subscriptions/").json() == []
        assert authed_client.get(f"/v1/users/{user.id}").status_code == 200

    def test_delete_not_found(self, authed_client):
        assert authed_client.delete(f"/v1/organizations/{NONEXISTENT_ORG_ID}").status_code == 404


class TestOrganizationRelationships:
    def test_memberships(self, authed_client, db_session):
        org = make_organization(db_session)
        for i in range(2):
            user = make_user(db_session, f"user_{i}", f"user{i}@example.com")
            OrganizationMembershipRepository(db_session).create(
                OrganizationMembershipCreate(
                    external_id=f"orgmem_{i}", organization_id=org.id, user_id=user.id
                )
            )

        response = authed_client.get(f"/v1/organizations/{org.id}/memberships")

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        assert {m["role"] for m in response.json()} == {"member"}

    def test_subscriptions(self, authed_client, db_session):
        org = make_organization(db_session)
        make_subscription(db_session, organization=org)

        response = authed_client.get(f"/v1/organizations/{org.id}/subscriptions")

        assert response.status_code == 200
        assert response.json()[0]["subscriber_organization_id"] == str(org.id)
        assert response.json()[0]["subscriber_type"] == "organization"

    def test_relationship_views_require_admin(self, client, db_session):
        org = make_organization(db_session)
        assert client.get(f"/v1/organizations/{org.id}/memberships").status_code == 401
        assert client.get(f"/v1/organizations/{org.id}/subscriptions").status_code == 401

    def test_unknown_organization(self, authed_client):
        response = authed_client.get(f"/v1/organizations/{NONEXISTENT_ORG_ID}/memberships")
        assert response.status_code == 404
