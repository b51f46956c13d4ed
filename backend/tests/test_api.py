import pytest

from agenda.models import Tenants

from .conftest import WEDNESDAY, add_availability

BOOKING = {
    "eventType": "intro",
    "guestName": "  Ana Diaz ",
    "guestEmail": "ana@example.com",
    "startISO": "2024-06-05T13:00:00Z",
}


def slots(client, date=WEDNESDAY, event_type="intro", tenant="acme"):
    return client.get("/public/slots", params={"u": tenant, "eventType": event_type, "date": date})


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"database": True, "redis": None}


class TestTenantResolution:
    def test_missing_tenant(self, client):
        response = client.get("/public/event-types")

        assert response.status_code == 400
        assert response.json() == {"detail": "user_required"}

    def test_unknown_tenant(self, client, tenant):
        response = client.get("/public/event-types", params={"u": "nobody"})

        assert response.status_code == 404
        assert response.json() == {"detail": "owner_not_found"}

    def test_header_is_accepted(self, client, tenant, event_type):
        response = client.get("/public/event-types", headers={"X-Owner-User": "Acme"})

        assert response.status_code == 200
        assert [item["slug"] for item in response.json()["items"]] == ["intro"]


def test_event_types(client, tenant, event_type):
    response = client.get("/public/event-types", params={"u": "acme"})

    assert response.status_code == 200
    assert response.json() == {
        "items": [{
            "id": str(event_type.id),
            "slug": "intro",
            "name": "Intro call",
            "description": None,
            "durationMin": 30,
        }],
    }


class TestSlots:
    def test_day_with_availability(self, client, event_type, wednesday_morning):
        response = slots(client)

        assert response.status_code == 200
        assert response.json() == {"slots": [{"iso": "2024-06-05T13:00:00Z", "label": "09:00"}]}

    def test_day_without_availability(self, client, event_type, wednesday_morning):
        response = slots(client, date="2024-06-06")

        assert response.status_code == 200
        assert response.json() == {"slots": []}

    def test_invalid_date(self, client, event_type):
        response = slots(client, date="05/06/2024")

        assert response.status_code == 400
        assert response.json() == {"detail": "invalid_date"}

    def test_unknown_event_type(self, client, tenant):
        response = slots(client, event_type="missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "event_type_not_found"}

    def test_tenant_with_broken_zone(self, client, db, tenant, event_type, wednesday_morning):
        tenant.timezone = "Nowhere/Special"
        db.commit()

        response = slots(client)

        assert response.status_code == 400
        assert response.json() == {"detail": "invalid_timezone"}


class TestBook:
    def test_book_then_slot_disappears(self, client, calendar_sync, event_type, wednesday_morning):
        response = client.post("/public/book", params={"u": "acme"}, json=BOOKING)

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        calendar_sync.assert_called_once_with(int(body["id"]))

        assert slots(client).json() == {"slots": []}

    def test_double_booking(self, client, calendar_sync, event_type):
        assert client.post("/public/book", params={"u": "acme"}, json=BOOKING).status_code == 200

        response = client.post("/public/book", params={"u": "acme"}, json={**BOOKING, "guestName": "Bea"})

        assert response.status_code == 409
        assert response.json() == {"detail": "slot_taken"}
        assert calendar_sync.call_count == 1

    def test_invalid_start(self, client, event_type):
        response = client.post("/public/book", params={"u": "acme"}, json={**BOOKING, "startISO": "soon"})

        assert response.status_code == 400
        assert response.json() == {"detail": "invalid_start"}

    def test_start_at_end_of_calendar(self, client, event_type):
        response = client.post(
            "/public/book",
            params={"u": "acme"},
            json={**BOOKING, "startISO": "9999-12-31T23:50:00Z"},
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "invalid_start"}

    def test_unknown_event_type(self, client, tenant):
        response = client.post("/public/book", params={"u": "acme"}, json=BOOKING)

        assert response.status_code == 404
        assert response.json() == {"detail": "event_type_not_found"}

    @pytest.mark.parametrize("field, value", [("guestEmail", "not-an-email"), ("guestName", "   ")])
    def test_body_validation(self, client, event_type, field, value):
        response = client.post("/public/book", params={"u": "acme"}, json={**BOOKING, field: value})

        assert response.status_code == 422

    def test_ics_export(self, client, event_type):
        booking_id = client.post("/public/book", params={"u": "acme"}, json=BOOKING).json()["id"]

        response = client.get(f"/public/booking/{booking_id}/ics", params={"u": "acme"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/calendar")
        body = response.text
        assert body.startswith("BEGIN:VCALENDAR\r\n")
        assert f"UID:booking-{booking_id}@agenda\r\n" in body
        assert "DTSTART:20240605T130000Z\r\n" in body
        assert "DTEND:20240605T133000Z\r\n" in body
        assert "STATUS:CONFIRMED\r\n" in body
        assert "Ana Diaz" in body

    def test_ics_is_tenant_scoped(self, client, db, event_type):
        booking_id = client.post("/public/book", params={"u": "acme"}, json=BOOKING).json()["id"]
        db.add(Tenants(slug="globex", name="Globex", timezone="UTC"))
        db.commit()

        response = client.get(f"/public/booking/{booking_id}/ics", params={"u": "globex"})

        assert response.status_code == 404
        assert response.json() == {"detail": "not_found"}


class TestAdminAvailability:
    def test_put_then_get(self, client, tenant):
        response = client.put(
            "/admin/availability",
            params={"u": "acme"},
            json={"days": [
                {"weekday": 3, "ranges": [{"start_min": 540, "end_min": 600}, {"start_min": 840, "end_min": 1440}]},
                {"weekday": 5, "ranges": [{"start_min": 600, "end_min": 540}]},
            ]},
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True, "inserted": 2}

        items = client.get("/admin/availability", params={"u": "acme"}).json()["items"]
        assert [(i["weekday"], i["start"], i["end"]) for i in items] == [(3, "09:00", "10:00"), (3, "14:00", "24:00")]

    def test_out_of_range_minutes(self, client, tenant):
        response = client.put(
            "/admin/availability",
            params={"u": "acme"},
            json={"days": [{"weekday": 3, "ranges": [{"start_min": 540, "end_min": 1500}]}]},
        )

        assert response.status_code == 422

    def test_strict_mode(self, client, monkeypatch, tenant):
        from agenda.config import get_settings

        monkeypatch.setattr(get_settings(), "strict_availability_ranges", True)

        response = client.put(
            "/admin/availability",
            params={"u": "acme"},
            json={"days": [{"weekday": 3, "ranges": [{"start_min": 600, "end_min": 540}]}]},
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "invalid_range"}


class TestAdminBookings:
    def test_create_list_and_cancel(self, client, db, tenant, event_type):
        add_availability(db, tenant.id, 3, 540, 600)
        created = client.post("/admin/bookings", params={"u": "acme"}, json=BOOKING)
        assert created.status_code == 200
        booking_id = created.json()["id"]

        page = client.get("/admin/bookings", params={"u": "acme", "date": WEDNESDAY}).json()
        assert page["page"] == 1
        assert page["timezone"] == "America/Caracas"
        assert page["items"] == [{
            "id": booking_id,
            "eventType": {"id": str(event_type.id), "name": "Intro call", "slug": "intro", "colorHex": "#4f46e5"},
            "guestName": "Ana Diaz",
            "guestEmail": "ana@example.com",
            "startsAt": "2024-06-05T13:00:00Z",
            "endsAt": "2024-06-05T13:30:00Z",
            "status": "confirmed",
            "durationMin": 30,
            "bufferMin": 10,
        }]

        url = f"/admin/bookings/{booking_id}/status"
        assert client.put(url, params={"u": "acme"}, json={"status": "cancelled"}).json() == {"ok": True, "changed": 1}
        assert client.put(url, params={"u": "acme"}, json={"status": "cancelled"}).json() == {"ok": True, "changed": 0}

        assert slots(client).json()["slots"][0]["label"] == "09:00"
        confirmed = client.get("/admin/bookings", params={"u": "acme", "status": "confirmed"}).json()
        assert confirmed["items"] == []

    def test_page_size_is_capped(self, client, tenant):
        response = client.get("/admin/bookings", params={"u": "acme", "pageSize": 10_000})

        assert response.status_code == 200
        assert response.json()["pageSize"] == 200

    def test_reconfirm_conflict(self, client, event_type):
        first = client.post("/admin/bookings", params={"u": "acme"}, json=BOOKING).json()["id"]
        client.put(f"/admin/bookings/{first}/status", params={"u": "acme"}, json={"status": "cancelled"})
        client.post("/admin/bookings", params={"u": "acme"}, json={**BOOKING, "guestName": "Bea"})

        response = client.put(f"/admin/bookings/{first}/status", params={"u": "acme"}, json={"status": "confirmed"})

        assert response.status_code == 409
        assert response.json() == {"detail": "slot_taken"}

    def test_status_of_missing_booking(self, client, tenant):
        response = client.put("/admin/bookings/999/status", params={"u": "acme"}, json={"status": "cancelled"})

        assert response.status_code == 404
        assert response.json() == {"detail": "not_found"}

    def test_unknown_status_value(self, client, tenant):
        response = client.put("/admin/bookings/1/status", params={"u": "acme"}, json={"status": "maybe"})

        assert response.status_code == 422
