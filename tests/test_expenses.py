"""Tests for the expense endpoints."""

import json

import pytest
from conftest import API

from carvault_api.app.services.validation import MAX_AMOUNT


def expense_payload(car_id, **overrides):
    payload = {
        "carId": car_id,
        "category": "Fuel",
        "description": "Full tank",
        "date": "2025-02-01T08:30:00Z",
        "amount": 54.3,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def car(alice, make_car):
    return make_car(alice)


@pytest.fixture
def log_expense(client):
    def _log(headers, car_id, **overrides):
        response = client.post(f"{API}/expenses/", json=expense_payload(car_id, **overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _log


class TestExpenseCrud:
    def test_create_and_get(self, client, alice, car):
        response = client.post(f"{API}/expenses/", json=expense_payload(car["id"]), headers=alice)
        assert response.status_code == 201
        expense = response.json()
        assert expense["category"] == "Fuel"
        assert expense["amount"] == 54.3
        assert expense["mileage"] is None
        assert expense["car"]["licensePlate"] == "ABC123"
        assert client.get(f"{API}/expenses/{expense['id']}", headers=alice).json() == expense

    def test_foreign_car_is_not_found(self, client, bob, car):
        response = client.post(f"{API}/expenses/", json=expense_payload(car["id"]), headers=bob)
        assert response.status_code == 404

    @pytest.mark.parametrize(
        "field, value",
        [("category", "Snacks"), ("amount", -0.01), ("mileage", -1), ("description", "")],
    )
    def test_invalid_fields_rejected(self, client, alice, car, field, value):
        response = client.post(
            f"{API}/expenses/", json=expense_payload(car["id"], **{field: value}), headers=alice
        )
        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    def test_zero_amount_allowed(self, client, alice, car):
        response = client.post(f"{API}/expenses/", json=expense_payload(car["id"], amount=0), headers=alice)
        assert response.status_code == 201

    def test_update_and_delete(self, client, alice, car, log_expense):
        expense = log_expense(alice, car["id"])
        response = client.put(
            f"{API}/expenses/{expense['id']}",
            json={"category": "Repairs", "amount": 120, "mileage": 43000},
            headers=alice,
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["category"] == "Repairs"
        assert updated["amount"] == 120
        assert updated["mileage"] == 43000
        assert updated["description"] == "Full tank"

        response = client.delete(f"{API}/expenses/{expense['id']}", headers=alice)
        assert response.json() == {"message": "Expense deleted successfully"}
        assert client.get(f"{API}/expenses/", headers=alice).json() == []

    def test_foreign_expense_is_not_found(self, client, alice, bob, car, log_expense):
        expense = log_expense(alice, car["id"])
        assert client.get(f"{API}/expenses/{expense['id']}", headers=bob).status_code == 404
        assert client.delete(f"{API}/expenses/{expense['id']}", headers=bob).status_code == 404


class TestExpenseListing:
    def test_list_newest_first(self, client, alice, car, log_expense):
        log_expense(alice, car["id"], date="2025-01-01T00:00:00Z", description="january")
        log_expense(alice, car["id"], date="2025-03-01T00:00:00Z", description="march")
        descriptions = [e["description"] for e in client.get(f"{API}/expenses/", headers=alice).json()]
        assert descriptions == ["march", "january"]

    def test_list_for_car(self, client, alice, make_car, car, log_expense):
        other = make_car(alice, licensePlate="OTHER1")
        log_expense(alice, car["id"])
        log_expense(alice, other["id"], description="other car")
        expenses = client.get(f"{API}/expenses/car/{other['id']}", headers=alice).json()
        assert [e["description"] for e in expenses] == ["other car"]

    def test_lists_are_scoped_to_owner(self, client, alice, bob, car, log_expense):
        log_expense(alice, car["id"])
        assert client.get(f"{API}/expenses/", headers=bob).json() == []
        assert client.get(f"{API}/expenses/car/{car['id']}", headers=bob).status_code == 404


class TestCategorySummary:
    def test_totals_largest_first(self, client, alice, car, log_expense):
        log_expense(alice, car["id"], category="Fuel", amount=40)
        log_expense(alice, car["id"], category="Fuel", amount=35.5)
        log_expense(alice, car["id"], category="Insurance", amount=600)
        log_expense(alice, car["id"], category="Parts", amount=75.5)

        response = client.get(f"{API}/expenses/summary/categories", headers=alice)
        assert response.status_code == 200
        assert response.json() == [
            {"category": "Insurance", "total": 600, "count": 1},
            {"category": "Fuel", "total": 75.5, "count": 2},
            {"category": "Parts", "total": 75.5, "count": 1},
        ]

    def test_empty_summary(self, client, alice):
        assert client.get(f"{API}/expenses/summary/categories", headers=alice).json() == []

    def test_summary_ignores_other_users(self, client, alice, bob, make_car, car, log_expense):
        log_expense(alice, car["id"], amount=10)
        bob_car = make_car(bob, licensePlate="BOB1")
        log_expense(bob, bob_car["id"], amount=99)
        assert client.get(f"{API}/expenses/summary/categories", headers=alice).json() == [
            {"category": "Fuel", "total": 10, "count": 1}
        ]


class TestAmountLimits:
    """Amounts must be finite and bounded so totals stay representable."""

    def _post_raw(self, client, headers, payload):
        # json.dumps writes float("inf") as the bare token Infinity, which
        # the request parser accepts.
        return client.post(
            f"{API}/expenses",
            content=json.dumps(payload).encode("utf-8"),
            headers={**headers, "Content-Type": "application/json"},
        )

    @pytest.mark.parametrize("amount", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_amount_rejected(self, client, alice, car, amount):
        response = self._post_raw(client, alice, expense_payload(car["id"], amount=amount))
        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"
        assert client.get(f"{API}/expenses", headers=alice).json() == []

    def test_non_finite_amount_rejected_on_update(self, client, alice, car, log_expense):
        expense = log_expense(alice, car["id"])
        response = client.put(
            f"{API}/expenses/{expense['id']}",
            content=b'{"amount": Infinity}',
            headers={**alice, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert client.get(f"{API}/expenses/{expense['id']}", headers=alice).json()["amount"] == 54.3

    @pytest.mark.parametrize("amount", [1e308, MAX_AMOUNT + 1])
    def test_amount_above_limit_rejected(self, client, alice, car, amount):
        response = client.post(f"{API}/expenses", json=expense_payload(car["id"], amount=amount), headers=alice)
        assert response.status_code == 400

    def test_huge_mileage_rejected(self, client, alice, car):
        response = client.post(
            f"{API}/expenses", json=expense_payload(car["id"], mileage=10**30), headers=alice
        )
        assert response.status_code == 400

    def test_summary_of_maximum_amounts_stays_finite(self, client, alice, car, log_expense):
        for _ in range(3):
            log_expense(alice, car["id"], amount=MAX_AMOUNT)
        response = client.get(f"{API}/expenses/summary/categories", headers=alice)
        assert response.status_code == 200
        assert response.json() == [{"category": "Fuel", "total": 3 * MAX_AMOUNT, "count": 3}]
        overview = client.get(f"{API}/statistics/overview", headers=alice)
        assert overview.status_code == 200
        assert overview.json()["totalSpent"] == 3 * MAX_AMOUNT
