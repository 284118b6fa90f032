"""Integration tests for the review endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers
from reviews.api import review_router
from shared.access import register_access_handlers

CUSTOMER = {"X-Actor-Id": "cust-api-1", "X-Actor-Type": "customer"}
OTHER_CUSTOMER = {"X-Actor-Id": "cust-api-2", "X-Actor-Type": "customer"}
ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Type": "admin"}

REVIEW = {"rating": 5, "title": "Great mount", "content": "Solid build, fits my rifle perfectly."}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(review_router)
    register_exception_handlers(app)
    register_access_handlers(app)
    return TestClient(app)


def _post(client, product_id, headers=CUSTOMER, **overrides):
    return client.post(f"/reviews/products/{product_id}", json={**REVIEW, **overrides}, headers=headers)


class TestSubmit:
    def test_customer_submits(self, client):
        response = _post(client, "prod-api-submit")
        assert response.status_code == 201
        review_id = response.json()["review_id"]

        review = client.get(f"/reviews/{review_id}").json()["review"]
        assert review["rating"] == 5
        assert review["customer_id"] == "cust-api-1"

    def test_requires_identity(self, client):
        response = client.post("/reviews/products/prod-api-anon", json=REVIEW)
        assert response.status_code == 403

    def test_out_of_range_rating(self, client):
        assert _post(client, "prod-api-range", rating=6).status_code == 422

    def test_duplicate_is_rejected(self, client):
        _post(client, "prod-api-dup")
        assert _post(client, "prod-api-dup").status_code == 400


class TestProductListing:
    def test_lists_with_stats(self, client):
        _post(client, "prod-api-list", rating=4)
        _post(client, "prod-api-list", headers=OTHER_CUSTOMER, rating=2)

        body = client.get("/reviews/products/prod-api-list", params={"sort_by": "rating", "sort_order": "asc"}).json()

        assert [r["rating"] for r in body["reviews"]] == [2, 4]
        assert body["stats"]["average_rating"] == 3.0
        assert body["pagination"]["total"] == 2

    def test_rejects_unknown_sort(self, client):
        assert client.get("/reviews/products/prod-api-list", params={"sort_by": "title"}).status_code == 422


class TestEditAndRemove:
    def test_author_edits(self, client):
        review_id = _post(client, "prod-api-edit").json()["review_id"]
        response = client.put(f"/reviews/{review_id}", json={"rating": 3}, headers=CUSTOMER)

        assert response.status_code == 200
        assert client.get(f"/reviews/{review_id}").json()["review"]["is_edited"] is True

    def test_other_customer_cannot_edit(self, client):
        review_id = _post(client, "prod-api-edit-other").json()["review_id"]
        assert client.put(f"/reviews/{review_id}", json={"rating": 1}, headers=OTHER_CUSTOMER).status_code == 403

    def test_admin_removes(self, client):
        review_id = _post(client, "prod-api-remove").json()["review_id"]
        response = client.request("DELETE", f"/reviews/{review_id}", json={"reason": "Spam"}, headers=ADMIN)

        assert response.status_code == 200
        assert client.get(f"/reviews/{review_id}").json()["review"]["status"] == "removed"

    def test_other_customer_cannot_remove(self, client):
        review_id = _post(client, "prod-api-remove-other").json()["review_id"]
        assert client.delete(f"/reviews/{review_id}", headers=OTHER_CUSTOMER).status_code == 403

    def test_unknown_review(self, client):
        assert client.get("/reviews/missing-review").status_code == 404


class TestHelpful:
    def test_vote(self, client):
        review_id = _post(client, "prod-api-helpful").json()["review_id"]
        response = client.post(f"/reviews/{review_id}/helpful", headers=OTHER_CUSTOMER)
        assert response.json()["helpful_count"] == 1

    def test_own_review(self, client):
        review_id = _post(client, "prod-api-own").json()["review_id"]
        assert client.post(f"/reviews/{review_id}/helpful", headers=CUSTOMER).status_code == 400


def test_my_reviews(client):
    _post(client, "prod-api-mine", headers={"X-Actor-Id": "cust-api-mine", "X-Actor-Type": "customer"})
    response = client.get("/reviews/mine", headers={"X-Actor-Id": "cust-api-mine", "X-Actor-Type": "customer"})
    assert len(response.json()["reviews"]) == 1
