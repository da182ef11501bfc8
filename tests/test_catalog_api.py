"""Catalog browsing, admin catalog management and price quotes."""

from decimal import Decimal

API = "/api/v1"


class TestBrowse:
    def test_list_rooms(self, client, test_room):
        response = client.get(f"{API}/rooms/", params={"guests": 2})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["total_pages"] == 1
        assert data["data"][0]["room_number"] == "101"

        assert client.get(f"{API}/rooms/", params={"guests": 3}).json()["total"] == 0

    def test_room_detail_shows_discounted_price(self, client, db_session, test_room):
        test_room.discount = Decimal("10")
        db_session.commit()
        response = client.get(f"{API}/rooms/{test_room.id}")
        assert response.status_code == 200
        assert Decimal(response.json()["current_price"]) == Decimal("90")

    def test_unknown_room(self, client):
        response = client.get(f"{API}/rooms/00000000-0000-4000-8000-000000000000")
        assert response.status_code == 404

    def test_menu(self, client, menu_items):
        response = client.get(f"{API}/menu/")
        assert response.status_code == 200
        assert response.json()["total"] == 2

    def test_menu_item_carries_category_name(self, client, menu_items):
        response = client.get(f"{API}/menu/{menu_items['burger'].id}")
        assert response.status_code == 200
        assert response.json()["category_name"] == "Mains"

    def test_menu_filtered_by_category(self, client, menu_items, menu_categories):
        response = client.get(f"{API}/menu/", params={"category_id": str(menu_categories["starters"].id)})
        assert [i["name"] for i in response.json()["data"]] == ["Salad"]


class TestMenuCategories:
    def test_list_in_display_order(self, client, menu_categories):
        response = client.get(f"{API}/menu/categories")
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Starters", "Mains"]

        assert client.get(f"{API}/menu/categories", params={"meal_type": "dinner"}).json() == []

    def test_get_category(self, client, menu_categories):
        response = client.get(f"{API}/menu/categories/{menu_categories['mains'].id}")
        assert response.status_code == 200
        assert response.json()["meal_type"] == "all-day"

    def test_full_menu_groups_available_items(self, client, db_session, menu_items):
        menu_items["salad"].is_available = False
        db_session.commit()
        response = client.get(f"{API}/menu/full")
        assert response.status_code == 200
        sections = {s["name"]: s for s in response.json()}
        assert [i["name"] for i in sections["Mains"]["items"]] == ["Burger"]
        assert sections["Starters"]["item_count"] == 0

    def test_featured(self, client, db_session, menu_items):
        assert client.get(f"{API}/menu/featured").json() == []
        menu_items["burger"].is_featured = True
        db_session.commit()
        response = client.get(f"{API}/menu/featured")
        assert [i["name"] for i in response.json()] == ["Burger"]
        assert client.get(f"{API}/menu/", params={"featured": True}).json()["total"] == 1

    def test_search_matches_name_and_description(self, client, db_session, menu_items):
        menu_items["salad"].description = "Crisp greens with burger sauce"
        db_session.commit()
        response = client.get(f"{API}/menu/search", params={"q": "burger"})
        assert response.status_code == 200
        assert sorted(i["name"] for i in response.json()) == ["Burger", "Salad"]

        assert client.get(f"{API}/menu/search").status_code == 400
        assert client.get(f"{API}/menu/search", params={"q": "  "}).status_code == 400


class TestGardenAvailability:
    def book(self, client, headers, garden, event_date):
        response = client.post(
            f"{API}/bookings/garden",
            json={
                "garden_id": str(garden.id),
                "event_date": event_date,
                "event_start_time": "18:00",
                "event_end_time": "22:00",
                "event_type": "wedding",
                "expected_guests": 50,
            },
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    def test_booked_date_hides_garden(self, client, auth_headers, test_garden):
        self.book(client, auth_headers, test_garden, "2030-07-04")

        response = client.get(f"{API}/gardens/availability", params={"date": "2030-07-04"})
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["date"] == "2030-07-04"
        assert data["count"] == 0
        assert data["data"] == []

        data = client.get(f"{API}/gardens/availability", params={"date": "2030-07-05"}).json()
        assert data["count"] == 1
        assert data["data"][0]["name"] == "Rose Garden"

    def test_cancelled_booking_frees_date(self, client, auth_headers, test_garden):
        booking = self.book(client, auth_headers, test_garden, "2030-07-04")
        client.patch(f"{API}/bookings/{booking['id']}/cancel", json={}, headers=auth_headers)

        data = client.get(f"{API}/gardens/availability", params={"date": "2030-07-04"}).json()
        assert data["count"] == 1

    def test_guest_count_filters_capacity(self, client, test_garden):
        params = {"date": "2030-07-04", "guests": 150}
        assert client.get(f"{API}/gardens/availability", params=params).json()["count"] == 0

    def test_date_is_required(self, client, test_garden):
        assert client.get(f"{API}/gardens/availability").status_code == 422


class TestAdminCatalog:
    def test_create_room(self, client, admin_headers):
        body = {
            "room_number": "202",
            "name": "Suite",
            "type": "suite",
            "capacity": 4,
            "price_per_night": "300.00",
        }
        response = client.post(f"{API}/admin/rooms/", json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        assert response.json()["type"] == "suite"

        response = client.post(f"{API}/admin/rooms/", json=body, headers=admin_headers)
        assert response.status_code == 400

    def test_staff_cannot_edit_catalog(self, client, staff_headers, test_room):
        response = client.patch(
            f"{API}/admin/rooms/{test_room.id}", json={"capacity": 3}, headers=staff_headers,
        )
        assert response.status_code == 403

    def test_delete_hides_table(self, client, admin_headers, test_table):
        response = client.delete(f"{API}/admin/tables/{test_table.id}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"{API}/tables/{test_table.id}").status_code == 404
        assert client.get(f"{API}/tables/").json()["total"] == 0

    def test_menu_category_crud(self, client, admin_headers, menu_items, menu_categories):
        body = {"name": "Desserts", "meal_type": "dinner", "display_order": 3, "available_from": "17:00"}
        response = client.post(f"{API}/admin/menu/categories/", json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        category = response.json()
        assert category["meal_type"] == "dinner"

        response = client.post(f"{API}/admin/menu/categories/", json=body, headers=admin_headers)
        assert response.status_code == 400

        response = client.patch(
            f"{API}/admin/menu/categories/{category['id']}", json={"is_featured": True}, headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_featured"] is True

        response = client.delete(f"{API}/admin/menu/categories/{category['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"{API}/menu/categories/{category['id']}").status_code == 404

    def test_category_with_items_cannot_be_deleted(self, client, admin_headers, menu_items, menu_categories):
        url = f"{API}/admin/menu/categories/{menu_categories['mains'].id}"
        assert client.delete(url, headers=admin_headers).status_code == 400

        client.delete(f"{API}/admin/menu/{menu_items['burger'].id}", headers=admin_headers)
        assert client.delete(url, headers=admin_headers).status_code == 200

    def test_create_menu_item_needs_category(self, client, admin_headers, menu_categories):
        body = {"name": "Soup", "price": "6.00", "category_id": str(menu_categories["starters"].id)}
        response = client.post(f"{API}/admin/menu/", json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        assert response.json()["category_name"] == "Starters"

        body["category_id"] = "00000000-0000-4000-8000-000000000000"
        assert client.post(f"{API}/admin/menu/", json=body, headers=admin_headers).status_code == 404

    def test_toggle_availability(self, client, admin_headers, staff_headers, menu_items):
        url = f"{API}/admin/menu/{menu_items['burger'].id}/availability"
        assert client.patch(url, headers=staff_headers).status_code == 403

        response = client.patch(url, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["is_available"] is False
        assert client.get(f"{API}/menu/").json()["total"] == 1

        assert client.patch(url, headers=admin_headers).json()["is_available"] is True


class TestQuote:
    def test_room_quote(self, client, test_room):
        response = client.post(
            f"{API}/pricing/quote",
            json={
                "kind": "room",
                "room_id": str(test_room.id),
                "check_in_date": "2030-06-01T14:00:00Z",
                "check_out_date": "2030-06-04T14:00:00Z",
                "number_of_guests": 2,
            },
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert Decimal(data["total_amount"]) == Decimal("330.00")
        assert Decimal(data["deposit"]) == Decimal("66.00")
        assert data["units"] == 3

    def test_room_quote_mixed_timezones(self, client, test_room):
        response = client.post(
            f"{API}/pricing/quote",
            json={
                "kind": "room",
                "room_id": str(test_room.id),
                "check_in_date": "2030-06-01T14:00:00Z",
                "check_out_date": "2030-06-04T14:00:00",
                "number_of_guests": 2,
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_garden_quote_uses_minimum_hours(self, client, test_garden):
        response = client.post(
            f"{API}/pricing/quote",
            json={
                "kind": "garden",
                "garden_id": str(test_garden.id),
                "event_start_time": "18:00",
                "event_end_time": "19:00",
                "expected_guests": 10,
            },
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["units"] == 2
        assert Decimal(data["subtotal"]) == Decimal("100.00")

    def test_order_quote(self, client, menu_items):
        response = client.post(
            f"{API}/pricing/quote",
            json={
                "kind": "order",
                "order_type": "delivery",
                "items": [
                    {"menu_item_id": str(menu_items["burger"].id), "quantity": 2},
                    {"menu_item_id": str(menu_items["salad"].id), "quantity": 1},
                ],
            },
        )
        assert response.status_code == 200, response.text
        assert Decimal(response.json()["total_amount"]) == Decimal("41.30")

    def test_quote_over_capacity(self, client, test_table):
        response = client.post(
            f"{API}/pricing/quote",
            json={"kind": "table", "table_id": str(test_table.id), "number_of_guests": 9},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
