"""Tests for building and signing post-purchase changesets."""
import pytest
from jose import jwt

from upsell.schemas import Offer, OfferVariant
from upsell.services.changeset_service import (
    ONE_TIME,
    SUBSCRIPTION,
    build_changes,
    sign_changeset,
    validate_changes,
)
from tests.helpers import TEST_SECRET, make_session_token


@pytest.fixture
def offer():
    return Offer(
        id="111",
        title="Dark Roast",
        product_title="Dark Roast",
        original_price="10.00",
        variants=[
            OfferVariant(variant_id="1", price="10.00", selling_plan_id="42"),
            OfferVariant(variant_id="2", price="12.00"),
        ],
    )


class TestBuildChanges:
    def test_one_time_purchase(self, offer):
        changes = build_changes(offer, variant_index=1, purchase_type=ONE_TIME, quantity=3)

        assert changes == [
            {
                "type": "add_variant",
                "variantId": "2",
                "quantity": 3,
                "discount": {"value": 50, "valueType": "percentage", "title": "Save 50%"},
            }
        ]

    def test_subscription(self, offer):
        changes = build_changes(offer, purchase_type=SUBSCRIPTION)

        assert len(changes) == 1
        change = changes[0]
        assert change["type"] == "add_subscription"
        assert change["variantId"] == "1"
        assert change["quantity"] == 1
        assert change["sellingPlanId"] == "42"
        assert change["initialShippingPrice"] == 10
        assert change["recurringShippingPrice"] == 10
        assert change["discount"] == {"value": 20, "valueType": "percentage", "title": "Save 20%"}
        assert change["shippingOption"] == {
            "title": "Subscription shipping line",
            "presentmentTitle": "Subscription shipping line",
        }

    def test_subscription_needs_selling_plan(self, offer):
        with pytest.raises(ValueError):
            build_changes(offer, variant_index=1, purchase_type=SUBSCRIPTION)

    @pytest.mark.parametrize("variant_index", [-1, 2])
    def test_variant_out_of_range(self, offer, variant_index):
        with pytest.raises(ValueError):
            build_changes(offer, variant_index=variant_index)

    def test_quantity_must_be_positive(self, offer):
        with pytest.raises(ValueError):
            build_changes(offer, quantity=0)

    def test_unknown_purchase_type(self, offer):
        with pytest.raises(ValueError):
            build_changes(offer, purchase_type="rental")


class TestValidateChanges:
    def test_accepts_built_changes(self, offer):
        one_time = build_changes(offer, variant_index=1, quantity=2)
        subscription = build_changes(offer, purchase_type=SUBSCRIPTION)

        assert validate_changes(one_time + subscription) == one_time + subscription

    def test_rejects_inflated_discount(self, offer):
        change = build_changes(offer)[0]
        change["discount"] = {"value": 100, "valueType": "percentage", "title": "Save 100%"}

        with pytest.raises(ValueError):
            validate_changes([change])

    def test_rejects_quantity_above_limit(self, offer):
        change = build_changes(offer)[0]
        change["quantity"] = 50

        with pytest.raises(ValueError):
            validate_changes([change])

    def test_rejects_free_subscription_shipping(self, offer):
        change = build_changes(offer, purchase_type=SUBSCRIPTION)[0]
        change["recurringShippingPrice"] = 0

        with pytest.raises(ValueError):
            validate_changes([change])

    def test_rejects_unknown_change_type(self):
        with pytest.raises(ValueError):
            validate_changes([{"type": "remove_line_item", "variantId": "1", "quantity": 1}])

    def test_rejects_extra_keys(self, offer):
        change = dict(build_changes(offer)[0], price="0.01")

        with pytest.raises(ValueError):
            validate_changes([change])


class TestSignChangeset:
    def test_token_claims(self, offer):
        changes = build_changes(offer)

        token = sign_changeset("ref-123", changes)
        claims = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])

        assert claims["sub"] == "ref-123"
        assert claims["iss"] == "test-api-key"
        assert claims["changes"] == changes
        assert isinstance(claims["iat"], int)
        assert claims["jti"]

    def test_tokens_are_unique(self, offer):
        changes = build_changes(offer)

        first = jwt.decode(sign_changeset("ref-123", changes), TEST_SECRET, algorithms=["HS256"])
        second = jwt.decode(sign_changeset("ref-123", changes), TEST_SECRET, algorithms=["HS256"])

        assert first["jti"] != second["jti"]


class TestSignChangesetEndpoint:
    def test_signs_accepted_changes(self, client, auth_headers, offer):
        changes = build_changes(offer)

        response = client.post(
            "/api/sign-changeset",
            headers=auth_headers,
            json={"referenceId": "ref-123", "changes": changes},
        )

        assert response.status_code == 200
        claims = jwt.decode(response.json()["token"], TEST_SECRET, algorithms=["HS256"])
        assert claims["sub"] == "ref-123"
        assert claims["changes"] == changes

    def test_reference_id_must_match_session(self, client, auth_headers, offer):
        response = client.post(
            "/api/sign-changeset",
            headers=auth_headers,
            json={"referenceId": "someone-else", "changes": build_changes(offer)},
        )

        assert response.status_code == 403

    def test_rejects_changes_outside_offer_rules(self, client, auth_headers):
        changes = [
            {
                "type": "add_variant",
                "variantId": "999",
                "quantity": 50,
                "discount": {"value": 100, "valueType": "percentage", "title": "Save 100%"},
            }
        ]

        response = client.post(
            "/api/sign-changeset",
            headers=auth_headers,
            json={"referenceId": "ref-123", "changes": changes},
        )

        assert response.status_code == 422
        assert "token" not in response.json()

    def test_empty_changes_rejected(self, client, auth_headers):
        response = client.post(
            "/api/sign-changeset",
            headers=auth_headers,
            json={"referenceId": "ref-123", "changes": []},
        )

        assert response.status_code == 422

    def test_requires_token(self, client, offer):
        response = client.post(
            "/api/sign-changeset",
            json={"referenceId": "ref-123", "changes": build_changes(offer)},
        )

        assert response.status_code == 401

    def test_matches_reference_id_in_token(self, client, offer):
        headers = {"Authorization": f"Bearer {make_session_token(reference_id='ref-777')}"}

        response = client.post(
            "/api/sign-changeset",
            headers=headers,
            json={"referenceId": "ref-777", "changes": build_changes(offer)},
        )

        assert response.status_code == 200
