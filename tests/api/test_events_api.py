from datetime import timedelta

from bitsa.models.enums import EventStatus
from bitsa.models.event import Event
from bitsa.services import event_service, registration_service
from bitsa.utils.datetime_utils import utcnow


def event_payload(**overrides):
    start = (utcnow() + timedelta(days=14)).replace(microsecond=0)
    data = {
        "title": "Cyber Security Bootcamp",
        "description": "Two days of CTF practice",
        "location": "ICT Lab",
        "event_type": "BOOTCAMP",
        "start_date": start.isoformat() + "Z",
        "end_date": (start + timedelta(days=1)).isoformat() + "Z",
        "max_attendees": 30,
    }
    data.update(overrides)
    return data


def test_create_event(client, auth_headers):
    response = client.post("/api/events/", json=event_payload(), headers=auth_headers)

    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    event = body["event"]
    assert event["slug"] == "cyber-security-bootcamp"
    assert event["status"] == "UPCOMING"
    assert event["available_slots"] == 30
    assert event["is_full"] is False
    assert event["start_date"].endswith("+00:00")


def test_create_event_validation(client, auth_headers):
    payload = event_payload()
    payload["end_date"], payload["start_date"] = payload["start_date"], payload["end_date"]
    del payload["title"]

    response = client.post("/api/events/", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert "title" in response.get_json()["errors"]
    assert Event.query.count() == 0


def test_create_event_requires_admin(client, student_headers):
    response = client.post("/api/events/", json=event_payload(), headers=student_headers)
    assert response.status_code == 403


def test_create_event_requires_token(client):
    assert client.post("/api/events/", json=event_payload()).status_code == 401


def test_list_events(client, make_event):
    for _ in range(3):
        make_event()
    make_event(status=EventStatus.CANCELLED)

    response = client.get("/api/events/?per_page=2&page=1")
    body = response.get_json()

    assert response.status_code == 200
    assert body["total"] == 4
    assert body["pages"] == 2
    assert body["current_page"] == 1
    assert len(body["events"]) == 2

    cancelled = client.get("/api/events/?status=cancelled").get_json()
    assert cancelled["total"] == 1


def test_list_events_bad_status(client):
    response = client.get("/api/events/?status=archived")
    assert response.status_code == 400


def test_get_event_by_id_and_slug(client, make_event):
    event = make_event(title="Data Science Day", slug="data-science-day")

    by_id = client.get(f"/api/events/{event.id}")
    by_slug = client.get("/api/events/slug/data-science-day")

    assert by_id.status_code == 200
    assert by_slug.get_json()["event"]["id"] == event.id
    assert client.get("/api/events/9999").status_code == 404
    assert client.get("/api/events/slug/missing").status_code == 404


def test_update_event(client, auth_headers, make_event):
    event = make_event(title="Old Title", slug="old-title")

    response = client.put(
        f"/api/events/{event.id}",
        json={"title": "New Title", "location": "Auditorium"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.get_json()["event"]
    assert body["slug"] == "new-title"
    assert body["location"] == "Auditorium"
    assert body["description"] == "An association event"


def test_update_missing_event(client, auth_headers):
    response = client.put("/api/events/9999", json={"title": "x"}, headers=auth_headers)
    assert response.status_code == 404


def test_delete_cancels_event(client, auth_headers, make_event, student):
    event = make_event()
    registration_service.register_simple(event.id, student.id)

    response = client.delete(f"/api/events/{event.id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()["event"]["status"] == "CANCELLED"
    # History is kept
    assert client.get(f"/api/events/{event.id}").status_code == 200
    assert event.registrations_count == 1


def test_stats_endpoint(client, auth_headers, make_event):
    make_event()
    response = client.get("/api/events/stats", headers=auth_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["stats"]["total_events"] == 1
    assert len(body["recent_events"]) == 1


def test_event_registrations_roster(client, auth_headers, make_event, make_user):
    event = make_event()
    for _ in range(2):
        registration_service.register_simple(event.id, make_user().id)

    response = client.get(f"/api/events/{event.id}/registrations", headers=auth_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["count"] == 2
    assert body["registrations"][0]["user"]["student_id"].startswith("BIT")


def test_patch_registration_status(client, auth_headers, make_event, student):
    event = make_event()
    registration = registration_service.register_simple(event.id, student.id)

    response = client.patch(
        f"/api/events/registrations/{registration.id}/status",
        json={"status": "ATTENDED"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["registration"]["status"] == "ATTENDED"

    bad = client.patch(
        f"/api/events/registrations/{registration.id}/status",
        json={"status": "GONE"},
        headers=auth_headers,
    )
    assert bad.status_code == 400


def test_read_routes_answer_json_on_unexpected_errors(client, auth_headers, make_event,
                                                       monkeypatch):
    event = make_event()

    def broken(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(event_service, "get_event", broken)
    monkeypatch.setattr(event_service, "get_event_by_slug", broken)
    monkeypatch.setattr(registration_service, "list_event_registrations", broken)

    for url, headers in [
        (f"/api/events/{event.id}", None),
        (f"/api/events/slug/{event.slug}", None),
        (f"/api/events/{event.id}/registrations", auth_headers),
    ]:
        response = client.get(url, headers=headers)
        assert response.status_code == 500
        assert response.get_json()["success"] is False
