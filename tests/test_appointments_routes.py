"""Tests for booking submission, listing and status changes."""

from datetime import datetime

from sqlmodel import select

from chairbook.models import Appointment, Customer
from chairbook.routers import appointments_routes
from chairbook.routers.appointments_routes import OUTSIDE_HOURS_DETAIL, SLOT_TAKEN_DETAIL
from chairbook.schemas import BookingCreate
from tests.conftest import booking_payload


def book(client, barber, service, when, email="sam@example.com"):
    return client.post("/book-appointment", json=booking_payload(barber["id"], service["id"], when, email))


class TestBookAppointment:
    def test_books_pending_appointment(self, client, session, barber, haircut):
        resp = book(client, barber, haircut, "2026-10-26T09:00:00")
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Appointment booked successfully!"

        stored = session.get(Appointment, body["appointment_id"])
        assert stored.status == "pending"
        assert stored.duration_minutes == 30
        assert stored.starts_at.isoformat() == "2026-10-26T09:00:00"

    def test_stored_datetimes_are_naive_shop_time(self, client, session, barber, haircut):
        resp = book(client, barber, haircut, "2026-10-26T13:00:00+00:00")
        assert resp.status_code == 201

        stored = session.get(Appointment, resp.json()["appointment_id"])
        assert stored.starts_at.tzinfo is None
        assert stored.created_at.tzinfo is None
        assert stored.starts_at == datetime(2026, 10, 26, 9, 0)

    def test_slot_taken(self, client, barber, haircut):
        assert book(client, barber, haircut, "2026-10-26T09:00:00").status_code == 201
        resp = book(client, barber, haircut, "2026-10-26T09:00:00", email="alex@example.com")
        assert resp.status_code == 409
        assert resp.json()["detail"] == SLOT_TAKEN_DETAIL

    def test_partial_overlap_taken(self, client, barber, haircut):
        long_service = client.post(
            "/services", json={"name": "Cut and Beard", "duration_minutes": 45}
        ).json()
        assert book(client, barber, long_service, "2026-10-26T10:00:00").status_code == 201
        resp = book(client, barber, haircut, "2026-10-26T10:30:00", email="alex@example.com")
        assert resp.status_code == 409

    def test_back_to_back_allowed(self, client, barber, haircut):
        assert book(client, barber, haircut, "2026-10-26T09:00:00").status_code == 201
        resp = book(client, barber, haircut, "2026-10-26T09:30:00", email="alex@example.com")
        assert resp.status_code == 201

    def test_outside_working_hours(self, client, barber, haircut):
        resp = book(client, barber, haircut, "2026-10-26T08:45:00")
        assert resp.status_code == 422
        assert resp.json()["detail"] == OUTSIDE_HOURS_DETAIL

    def test_over_lunch_break(self, client, barber, haircut):
        resp = book(client, barber, haircut, "2026-10-26T11:45:00")
        assert resp.status_code == 422
        assert resp.json()["detail"] == OUTSIDE_HOURS_DETAIL

    def test_day_off(self, client, barber, haircut):
        resp = book(client, barber, haircut, "2026-10-27T10:00:00")
        assert resp.status_code == 422

    def test_past_rejected(self, client, barber, haircut):
        # clock is pinned to 2026-10-19 10:07
        resp = book(client, barber, haircut, "2026-10-19T09:30:00")
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Cannot book an appointment in the past"

    def test_same_day_off_grid_start_accepted(self, client, barber, haircut):
        # the server does not insist on the slot picker's grid
        resp = book(client, barber, haircut, "2026-10-19T10:15:00")
        assert resp.status_code == 201

    def test_missing_service_and_barber(self, client, barber, haircut):
        resp = client.post("/book-appointment", json=booking_payload(barber["id"], 999, "2026-10-26T09:00:00"))
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Service not found"
        resp = client.post("/book-appointment", json=booking_payload(999, haircut["id"], "2026-10-26T09:00:00"))
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Barber not found"

    def test_missing_fields(self, client, barber, haircut):
        payload = booking_payload(barber["id"], haircut["id"], "2026-10-26T09:00:00")
        del payload["customer_phone"]
        assert client.post("/book-appointment", json=payload).status_code == 422

    def test_cancelled_slot_can_be_rebooked(self, client, barber, haircut):
        first = book(client, barber, haircut, "2026-10-26T09:00:00").json()
        resp = client.patch(f"/appointments/{first['appointment_id']}/status", json={"status": "cancelled"})
        assert resp.status_code == 200
        resp = book(client, barber, haircut, "2026-10-26T09:00:00", email="alex@example.com")
        assert resp.status_code == 201

    def test_customer_reused_and_phone_updated(self, client, session, barber, haircut):
        book(client, barber, haircut, "2026-10-26T09:00:00")
        payload = booking_payload(barber["id"], haircut["id"], "2026-10-26T10:00:00")
        payload["customer_phone"] = "555-0199"
        assert client.post("/book-appointment", json=payload).status_code == 201

        customers = session.exec(select(Customer)).all()
        assert len(customers) == 1
        assert customers[0].phone == "555-0199"

    def test_aware_datetime_converted_to_shop_time(self, client, barber, haircut):
        # 13:00 UTC is 09:00 in New York (EDT) on this date
        resp = book(client, barber, haircut, "2026-10-26T13:00:00+00:00")
        assert resp.status_code == 201
        listed = client.get("/appointments", params={"barber_id": barber["id"], "date": "2026-10-26"})
        assert listed.json()[0]["starts_at"] == "2026-10-26T09:00:00"


class TestListAppointments:
    def test_lists_day_in_order(self, client, barber, haircut):
        book(client, barber, haircut, "2026-10-26T14:00:00")
        book(client, barber, haircut, "2026-10-26T09:00:00", email="alex@example.com")
        book(client, barber, haircut, "2026-11-02T09:00:00", email="kim@example.com")

        resp = client.get("/appointments", params={"barber_id": barber["id"], "date": "2026-10-26"})
        assert resp.status_code == 200
        assert [a["starts_at"][11:16] for a in resp.json()] == ["09:00", "14:00"]
        assert all(a["status"] == "pending" for a in resp.json())

    def test_requires_query_params(self, client):
        assert client.get("/appointments").status_code == 422


class TestStatusUpdate:
    def test_confirm(self, client, barber, haircut):
        appt_id = book(client, barber, haircut, "2026-10-26T09:00:00").json()["appointment_id"]
        resp = client.patch(f"/appointments/{appt_id}/status", json={"status": "confirmed"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "confirmed"

    def test_unchanged_status(self, client, barber, haircut):
        appt_id = book(client, barber, haircut, "2026-10-26T09:00:00").json()["appointment_id"]
        resp = client.patch(f"/appointments/{appt_id}/status", json={"status": "pending"})
        assert resp.status_code == 409

    def test_invalid_status(self, client, barber, haircut):
        appt_id = book(client, barber, haircut, "2026-10-26T09:00:00").json()["appointment_id"]
        resp = client.patch(f"/appointments/{appt_id}/status", json={"status": "no-show"})
        assert resp.status_code == 422

    def test_missing_appointment(self, client):
        resp = client.patch("/appointments/999/status", json={"status": "confirmed"})
        assert resp.status_code == 404

    def test_reactivation_blocked_when_slot_rebooked(self, client, barber, haircut):
        first = book(client, barber, haircut, "2026-10-26T09:00:00").json()["appointment_id"]
        client.patch(f"/appointments/{first}/status", json={"status": "cancelled"})
        assert book(client, barber, haircut, "2026-10-26T09:00:00", email="alex@example.com").status_code == 201

        resp = client.patch(f"/appointments/{first}/status", json={"status": "confirmed"})
        assert resp.status_code == 409
        assert resp.json()["detail"] == SLOT_TAKEN_DETAIL

    def test_reactivation_when_slot_still_free(self, client, barber, haircut):
        appt_id = book(client, barber, haircut, "2026-10-26T09:00:00").json()["appointment_id"]
        client.patch(f"/appointments/{appt_id}/status", json={"status": "cancelled"})
        resp = client.patch(f"/appointments/{appt_id}/status", json={"status": "pending"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "pending"


class TestCustomerRegistration:
    def test_concurrent_registration_reuses_existing_customer(self, session, monkeypatch):
        session.add(Customer(name="Sam Reed", email="sam@example.com", phone="555-0100"))
        session.commit()

        # the first lookup runs before the other request has committed
        real_lookup = appointments_routes._customer_by_email
        lookups = []

        def late_lookup(sess, email):
            lookups.append(email)
            if len(lookups) == 1:
                return None
            return real_lookup(sess, email)

        monkeypatch.setattr(appointments_routes, "_customer_by_email", late_lookup)

        booking = BookingCreate(**booking_payload(1, 1, "2026-10-26T09:00:00"))
        customer = appointments_routes._find_or_create_customer(session, booking)

        assert customer.id is not None
        assert customer.email == "sam@example.com"
        assert len(lookups) == 2
        assert len(session.exec(select(Customer)).all()) == 1
