# backend/tests/routes/test_mentors_routes.py
from datetime import datetime, timedelta, timezone

from tests._helpers import MENTEE_ID, MENTOR_ID, OTHER_MENTOR_ID, auth_headers, make_session, make_slot

BASE = "/api/v1/mentors"


def _at(day: int, hour: int) -> datetime:
    return datetime(2030, 1, day, hour, tzinfo=timezone.utc)


class TestAvailabilityEndpoint:
    def test_grouped_availability(self, client, db):
        make_slot(db, start=_at(16, 9))
        make_slot(db, start=_at(16, 14))
        make_slot(db, start=_at(18, 9))

        response = client.get(
            f"{BASE}/{MENTOR_ID}/availability", params={"start": "2030-01-16", "end": "2030-01-20"}
        )

        assert response.status_code == 200
        data = response.json()
        assert [d["date"] for d in data] == ["2030-01-16", "2030-01-18"]
        assert len(data[0]["slots"]) == 2

    def test_inverted_range_is_400(self, client):
        response = client.get(
            f"{BASE}/{MENTOR_ID}/availability", params={"start": "2030-01-20", "end": "2030-01-16"}
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DATE_RANGE"

    def test_extreme_dates_are_400(self, client):
        for params in (
            {"start": "9999-12-31", "end": "9999-12-31"},
            {"start": "0001-01-01", "end": "0001-01-01", "utc_offset_minutes": 60},
        ):
            response = client.get(f"{BASE}/{MENTOR_ID}/availability", params=params)
            assert response.status_code == 400
            assert response.json()["code"] == "INVALID_DATE_RANGE"


class TestCalendarEndpoint:
    def test_month_grid(self, client, db):
        slot = make_slot(db, start=_at(20, 9))
        booked = make_slot(db, start=_at(22, 9))
        make_session(db, booked)

        response = client.get(
            f"{BASE}/{MENTOR_ID}/calendar",
            params={"year": 2030, "month": 0},
            headers=auth_headers(MENTEE_ID),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["month"] == 0
        assert len(data["days"]) == 35
        days = {d["date"]: d for d in data["days"]}
        assert days["2030-01-15"]["is_today"]
        assert days[slot.start_time.date().isoformat()]["has_availability"]
        assert days["2030-01-22"]["has_session"]
        assert not days["2030-01-22"]["has_availability"]

    def test_month_out_of_range_is_400(self, client):
        response = client.get(f"{BASE}/{MENTOR_ID}/calendar", params={"year": 2030, "month": 12})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_MONTH"


class TestSlotManagement:
    def test_publish_and_withdraw(self, client):
        start = _at(20, 9)
        response = client.post(
            f"{BASE}/me/slots",
            json={
                "slots": [
                    {
                        "start_time": start.isoformat(),
                        "end_time": (start + timedelta(hours=1)).isoformat(),
                    }
                ]
            },
            headers=auth_headers(MENTOR_ID),
        )
        assert response.status_code == 201
        (slot,) = response.json()
        assert slot["mentor_id"] == MENTOR_ID
        assert slot["is_available"] is True

        withdrawn = client.post(
            f"{BASE}/me/slots/{slot['id']}/withdraw", headers=auth_headers(MENTOR_ID)
        )
        assert withdrawn.status_code == 200
        assert withdrawn.json()["is_available"] is False

    def test_publish_requires_offsets(self, client):
        response = client.post(
            f"{BASE}/me/slots",
            json={"slots": [{"start_time": "2030-01-20T09:00:00", "end_time": "2030-01-20T10:00:00"}]},
            headers=auth_headers(MENTOR_ID),
        )
        assert response.status_code == 422

    def test_publish_far_future_is_400(self, client):
        response = client.post(
            f"{BASE}/me/slots",
            json={
                "slots": [
                    {
                        "start_time": "9999-12-31T22:00:00-05:00",
                        "end_time": "9999-12-31T23:00:00-05:00",
                    }
                ]
            },
            headers=auth_headers(MENTOR_ID),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SLOT_WINDOW"

    def test_overlap_is_409(self, client, db):
        make_slot(db, start=_at(20, 9))
        response = client.post(
            f"{BASE}/me/slots",
            json={
                "slots": [
                    {"start_time": _at(20, 9).isoformat(), "end_time": _at(20, 10).isoformat()}
                ]
            },
            headers=auth_headers(MENTOR_ID),
        )
        assert response.status_code == 409
        assert response.json()["code"] == "SLOT_OVERLAP"

    def test_cannot_withdraw_someone_elses_slot(self, client, db):
        slot = make_slot(db, mentor_id=OTHER_MENTOR_ID)
        response = client.post(
            f"{BASE}/me/slots/{slot.id}/withdraw", headers=auth_headers(MENTOR_ID)
        )
        assert response.status_code == 404

    def test_publish_requires_identity(self, client):
        response = client.post(
            f"{BASE}/me/slots",
            json={
                "slots": [
                    {"start_time": _at(20, 9).isoformat(), "end_time": _at(20, 10).isoformat()}
                ]
            },
        )
        assert response.status_code == 401
