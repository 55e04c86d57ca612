from datetime import timedelta

from bitsa.utils.datetime_utils import utcnow


def _iso(dt):
    return dt.replace(microsecond=0).isoformat() + "Z"


def test_form_registration_lifecycle(client, auth_headers, make_user, headers_of):
    """Admin publishes an event with an approval form; members apply and attend."""
    start = utcnow() + timedelta(days=5)
    event = client.post(
        "/api/events/",
        json={
            "title": "AI Summit",
            "description": "Talks and demos",
            "location": "Main Auditorium",
            "event_type": "CONFERENCE",
            "start_date": _iso(start),
            "end_date": _iso(start + timedelta(hours=6)),
            "max_attendees": 2,
        },
        headers=auth_headers,
    ).get_json()["event"]

    form = client.post(
        f"/api/events/admin/form/{event['id']}",
        json={
            "requires_approval": True,
            "fields": [
                {"label": "Full name", "field_type": "text", "required": True},
                {"label": "Track", "field_type": "radio", "options": ["ML", "Robotics"],
                 "required": True},
            ],
        },
        headers=auth_headers,
    ).get_json()["form"]
    name_id, track_id = (str(f["id"]) for f in form["fields"])

    members = [make_user() for _ in range(3)]
    statuses = []
    for member in members:
        response = client.post(
            "/api/events/student/form/submit",
            json={"form_id": form["id"], "responses": {name_id: member.name, track_id: "ML"}},
            headers=headers_of(member),
        )
        statuses.append(response.status_code)
    # Two seats: pending submissions hold them
    assert statuses == [201, 201, 400]

    listing = client.get(
        f"/api/events/admin/submissions/{event['id']}?status=PENDING", headers=auth_headers
    ).get_json()
    ids = [s["id"] for s in listing["submissions"]]
    assert len(ids) == 2

    approved = client.post(
        "/api/events/admin/submissions/bulk-approve",
        json={"submission_ids": ids},
        headers=auth_headers,
    ).get_json()
    assert approved["count"] == 2

    client.patch(f"/api/events/admin/submissions/{ids[0]}/attendance",
                 json={"attended": True}, headers=auth_headers)

    stats = client.get(
        f"/api/events/admin/attendance/{event['id']}", headers=auth_headers
    ).get_json()["stats"]
    assert stats["approved"] == 2
    assert stats["attended"] == 1
    assert stats["attendance_rate"] == 50.0

    form_event = client.get(f"/api/events/{event['id']}").get_json()["event"]
    assert form_event["requires_registration"] is True


def test_simple_registration_lifecycle(client, auth_headers, student, student_headers, make_event):
    """Register, cancel, register again; a cancelled event refuses new members."""
    event = make_event(max_attendees=1)
    register = {"event_id": event.id}

    first = client.post("/api/events/student/simple-register", json=register,
                        headers=student_headers)
    assert first.status_code == 201
    registration_id = first.get_json()["registration"]["id"]

    cancelled = client.delete(f"/api/events/student/registrations/{registration_id}",
                              headers=student_headers)
    assert cancelled.status_code == 200

    again = client.post("/api/events/student/simple-register", json=register,
                        headers=student_headers)
    assert again.status_code == 201
    assert client.get(f"/api/events/{event.id}").get_json()["event"]["is_full"] is True

    client.delete(f"/api/events/student/registrations/{again.get_json()['registration']['id']}",
                  headers=student_headers)
    client.delete(f"/api/events/{event.id}", headers=auth_headers)

    refused = client.post("/api/events/student/simple-register", json=register,
                          headers=student_headers)
    assert refused.status_code == 400
    assert refused.get_json()["message"] == "This event has been cancelled"
