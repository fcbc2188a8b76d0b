"""Tests for the car endpoints and CarService."""

import asyncio
import threading

import pytest
from conftest import API, TODAY, car_payload

from carvault_api.app.core.exceptions import ConflictError
from carvault_api.app.schemas.car import CarCreate
from carvault_api.app.services.car_service import CarService


class TestCreateCar:
    def test_create_and_read_back(self, client, alice):
        response = client.post(f"{API}/cars/", json=car_payload(), headers=alice)
        assert response.status_code == 201
        car = response.json()
        assert car["make"] == "Toyota"
        assert car["licensePlate"] == "ABC123"
        assert car["mileage"] == 0
        assert car["vin"] is None

        fetched = client.get(f"{API}/cars/{car['id']}", headers=alice)
        assert fetched.status_code == 200
        assert fetched.json() == car

    def test_owner_comes_from_token(self, client, alice):
        me = client.get(f"{API}/auth/me", headers=alice).json()
        car = client.post(
            f"{API}/cars/", json=car_payload(ownerId="someone-else"), headers=alice
        ).json()
        assert car["ownerId"] == me["id"]

    def test_text_is_trimmed_and_vin_upper_cased(self, client, alice):
        car = client.post(
            f"{API}/cars/",
            json=car_payload(make="  Honda ", vin="1hgcm82633a004352", notes="   "),
            headers=alice,
        ).json()
        assert car["make"] == "Honda"
        assert car["vin"] == "1HGCM82633A004352"
        assert car["notes"] is None

    @pytest.mark.parametrize("year", [1900, 2026])
    def test_year_bounds_accepted(self, client, alice, year):
        response = client.post(f"{API}/cars/", json=car_payload(year=year), headers=alice)
        assert response.status_code == 201

    @pytest.mark.parametrize("year", [1899, 2027])
    def test_year_out_of_range_rejected(self, client, alice, year):
        response = client.post(f"{API}/cars/", json=car_payload(year=year), headers=alice)
        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("make", "   "),
            ("licensePlate", ""),
            ("mileage", -1),
            ("mileage", 10_000_001),
            ("mileage", 10**30),
            ("year", "old"),
        ],
    )
    def test_invalid_fields_rejected(self, client, alice, field, value):
        response = client.post(f"{API}/cars/", json=car_payload(**{field: value}), headers=alice)
        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    def test_mileage_upper_bound_accepted(self, client, alice):
        response = client.post(f"{API}/cars/", json=car_payload(mileage=10_000_000), headers=alice)
        assert response.status_code == 201
        assert response.json()["mileage"] == 10_000_000

    def test_missing_required_field_rejected(self, client, alice):
        payload = car_payload()
        del payload["color"]
        response = client.post(f"{API}/cars/", json=payload, headers=alice)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "color"


class TestPlateUniqueness:
    """License plates are unique across all users."""

    def test_same_user_duplicate_rejected(self, client, alice, make_car):
        make_car(alice, licensePlate="XYZ789")
        response = client.post(f"{API}/cars/", json=car_payload(licensePlate="xyz789"), headers=alice)
        assert response.status_code == 400
        assert response.json()["kind"] == "Conflict"

    def test_other_user_duplicate_rejected(self, client, alice, bob, make_car):
        make_car(alice, licensePlate="XYZ789")
        response = client.post(f"{API}/cars/", json=car_payload(licensePlate=" xyz789 "), headers=bob)
        assert response.status_code == 400
        assert response.json() == {
            "kind": "Conflict",
            "message": "A car with this license plate already exists",
        }

    def test_update_to_taken_plate_rejected(self, client, alice, bob, make_car):
        make_car(alice, licensePlate="AAA111")
        car = make_car(bob, licensePlate="BBB222")
        response = client.put(f"{API}/cars/{car['id']}", json={"licensePlate": "aaa111"}, headers=bob)
        assert response.status_code == 400
        assert response.json()["kind"] == "Conflict"

    def test_update_keeping_own_plate_allowed(self, client, alice, make_car):
        car = make_car(alice, licensePlate="AAA111")
        response = client.put(
            f"{API}/cars/{car['id']}",
            json={"licensePlate": "aaa111", "color": "Red"},
            headers=alice,
        )
        assert response.status_code == 200
        assert response.json()["licensePlate"] == "AAA111"
        assert response.json()["color"] == "Red"

    def test_plate_freed_by_delete(self, client, alice, bob, make_car):
        car = make_car(alice, licensePlate="AAA111")
        client.delete(f"{API}/cars/{car['id']}", headers=alice)
        make_car(bob, licensePlate="AAA111")

    def test_unique_index_catches_concurrent_insert(self, client, alice, monkeypatch):
        """Two writers that both pass the lookup still cannot share a plate."""
        owner_id = client.get(f"{API}/auth/me", headers=alice).json()["id"]
        monkeypatch.setattr(CarService, "_validate", classmethod(lambda cls, *args: None))
        data = CarCreate(**car_payload(licensePlate="RACE1"))
        asyncio.run(CarService.create(owner_id, data, today=TODAY))
        with pytest.raises(ConflictError):
            asyncio.run(CarService.create(owner_id, data, today=TODAY))

    def test_two_owners_racing_for_a_plate(self, client, alice, bob, monkeypatch):
        """Both writers pass the lookup before either inserts; exactly one wins."""
        owners = [client.get(f"{API}/auth/me", headers=h).json()["id"] for h in (alice, bob)]
        barrier = threading.Barrier(len(owners))
        check_plate = CarService._validate.__func__

        def check_then_wait(cls, *args):
            check_plate(cls, *args)
            barrier.wait(timeout=5)

        monkeypatch.setattr(CarService, "_validate", classmethod(check_then_wait))
        outcomes = []

        def add_car(owner_id):
            data = CarCreate(**car_payload(licensePlate="RACE2"))
            try:
                asyncio.run(CarService.create(owner_id, data, today=TODAY))
            except ConflictError:
                outcomes.append("conflict")
            else:
                outcomes.append("created")

        threads = [threading.Thread(target=add_car, args=(owner,)) for owner in owners]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert sorted(outcomes) == ["conflict", "created"]
        plates = [
            car["licensePlate"]
            for headers in (alice, bob)
            for car in client.get(f"{API}/cars", headers=headers).json()
        ]
        assert plates == ["RACE2"]


class TestOwnership:
    """Another user's car behaves exactly like a missing one."""

    def test_list_only_shows_own_cars(self, client, alice, bob, make_car):
        make_car(alice, licensePlate="AAA111")
        make_car(bob, licensePlate="BBB222")
        plates = [car["licensePlate"] for car in client.get(f"{API}/cars/", headers=alice).json()]
        assert plates == ["AAA111"]

    def test_list_newest_first(self, client, alice, make_car):
        make_car(alice, licensePlate="AAA111")
        make_car(alice, licensePlate="BBB222")
        plates = [car["licensePlate"] for car in client.get(f"{API}/cars/", headers=alice).json()]
        assert plates == ["BBB222", "AAA111"]

    def test_get_foreign_car_is_not_found(self, client, alice, bob, make_car):
        car = make_car(alice)
        foreign = client.get(f"{API}/cars/{car['id']}", headers=bob)
        missing = client.get(f"{API}/cars/does-not-exist", headers=bob)
        assert foreign.status_code == missing.status_code == 404
        assert foreign.json() == missing.json()

    def test_update_foreign_car_is_not_found(self, client, alice, bob, make_car):
        car = make_car(alice)
        response = client.put(f"{API}/cars/{car['id']}", json={"color": "Black"}, headers=bob)
        assert response.status_code == 404
        assert client.get(f"{API}/cars/{car['id']}", headers=alice).json()["color"] == "Blue"

    def test_delete_foreign_car_is_not_found(self, client, alice, bob, make_car):
        car = make_car(alice)
        response = client.delete(f"{API}/cars/{car['id']}", headers=bob)
        assert response.status_code == 404
        assert client.get(f"{API}/cars/{car['id']}", headers=alice).status_code == 200


class TestUpdateAndDelete:
    def test_partial_update_keeps_other_fields(self, client, alice, make_car):
        car = make_car(alice, mileage=1000)
        response = client.put(f"{API}/cars/{car['id']}", json={"mileage": 2500}, headers=alice)
        assert response.status_code == 200
        updated = response.json()
        assert updated["mileage"] == 2500
        assert updated["make"] == car["make"]
        assert updated["licensePlate"] == car["licensePlate"]
        assert updated["createdAt"] == car["createdAt"]

    def test_empty_update_changes_nothing(self, client, alice, make_car):
        car = make_car(alice)
        response = client.put(f"{API}/cars/{car['id']}", json={}, headers=alice)
        assert response.status_code == 200
        assert response.json() == car

    def test_update_checks_year(self, client, alice, make_car):
        car = make_car(alice)
        response = client.put(f"{API}/cars/{car['id']}", json={"year": 2027}, headers=alice)
        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    @pytest.mark.parametrize("field", ["make", "licensePlate", "year"])
    def test_null_for_required_field_rejected(self, client, alice, make_car, field):
        car = make_car(alice)
        response = client.put(f"{API}/cars/{car['id']}", json={field: None}, headers=alice)
        assert response.status_code == 400

    def test_optional_field_can_be_cleared(self, client, alice, make_car):
        car = make_car(alice, notes="first owner")
        response = client.put(f"{API}/cars/{car['id']}", json={"notes": None}, headers=alice)
        assert response.status_code == 200
        assert response.json()["notes"] is None

    def test_delete_then_get_is_not_found(self, client, alice, make_car):
        car = make_car(alice)
        response = client.delete(f"{API}/cars/{car['id']}", headers=alice)
        assert response.status_code == 200
        assert response.json() == {"message": "Car deleted successfully"}
        assert client.get(f"{API}/cars/{car['id']}", headers=alice).status_code == 404
        assert client.delete(f"{API}/cars/{car['id']}", headers=alice).status_code == 404
