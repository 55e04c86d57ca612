import pytest

from bitsa.models.enums import SubmissionStatus
from bitsa.models.submission import RegistrationSubmission
from bitsa.services import form_service, submission_service

FORM_PAYLOAD = {
    "requires_approval": True,
    "fields": [
        {"label": "Full name", "field_type": "text", "required": True,
         "placeholder": "As on your ID"},
        {"label": "T-shirt size", "field_type": "select", "options": ["S", "M", "L"]},
    ],
}


@pytest.fixture
def pending_form(admin, make_event):
    event = make_event()
    return form_service.create_or_update_form(
        event.id,
        True,
        [{"label": "Full name", "field_type": "text", "required": True}],
        admin.id,
    )


def submit_as(form, user, name="Someone"):
    return submission_service.submit(form.id, user.id, {str(form.fields[0].id): name})


def test_save_form(client, auth_headers, make_event):
    event = make_event()

    response = client.post(f"/api/events/admin/form/{event.id}", json=FORM_PAYLOAD,
                           headers=auth_headers)

    assert response.status_code == 201
    form = response.get_json()["form"]
    assert form["requires_approval"] is True
    assert [(f["label"], f["order"]) for f in form["fields"]] == [
        ("Full name", 0),
        ("T-shirt size", 1),
    ]

    fetched = client.get(f"/api/events/admin/form/{event.id}", headers=auth_headers)
    assert fetched.get_json()["form"]["id"] == form["id"]


@pytest.mark.parametrize(
    "payload",
    [
        {"fields": []},
        {"fields": [{"label": "Color", "field_type": "hologram"}]},
        {"fields": [{"label": "Size", "field_type": "select"}]},
        {"fields": [{"field_type": "text"}]},
    ],
)
def test_save_form_validation(client, auth_headers, make_event, payload):
    event = make_event()
    response = client.post(f"/api/events/admin/form/{event.id}", json=payload,
                           headers=auth_headers)
    assert response.status_code == 400


def test_save_form_missing_event(client, auth_headers):
    response = client.post("/api/events/admin/form/999", json=FORM_PAYLOAD, headers=auth_headers)
    assert response.status_code == 404


def test_form_routes_require_admin(client, student_headers, make_event):
    event = make_event()
    response = client.post(f"/api/events/admin/form/{event.id}", json=FORM_PAYLOAD,
                           headers=student_headers)
    assert response.status_code == 403


def test_list_submissions(client, auth_headers, pending_form, make_user):
    for _ in range(3):
        submit_as(pending_form, make_user())

    response = client.get(
        f"/api/events/admin/submissions/{pending_form.event_id}?per_page=2",
        headers=auth_headers,
    )

    body = response.get_json()
    assert response.status_code == 200
    assert body["total"] == 3
    assert len(body["submissions"]) == 2
    assert body["submissions"][0]["status"] == "PENDING"
    assert "user" in body["submissions"][0]


def test_list_submissions_missing_event(client, auth_headers):
    assert client.get("/api/events/admin/submissions/999", headers=auth_headers).status_code == 404


def test_update_submission_status(client, auth_headers, pending_form, student):
    submission = submit_as(pending_form, student)

    no_reason = client.patch(
        f"/api/events/admin/submissions/{submission.id}/status",
        json={"status": "REJECTED"},
        headers=auth_headers,
    )
    assert no_reason.status_code == 400

    response = client.patch(
        f"/api/events/admin/submissions/{submission.id}/status",
        json={"status": "REJECTED", "rejection_reason": "Event is for finalists"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.get_json()["submission"]
    assert body["status"] == "REJECTED"
    assert body["rejection_reason"] == "Event is for finalists"

    missing = client.patch(
        "/api/events/admin/submissions/999/status",
        json={"status": "APPROVED"},
        headers=auth_headers,
    )
    assert missing.status_code == 404


def test_bulk_approve(client, auth_headers, pending_form, make_user):
    subs = [submit_as(pending_form, make_user()) for _ in range(3)]

    response = client.post(
        "/api/events/admin/submissions/bulk-approve",
        json={"submission_ids": [subs[0].id, subs[1].id]},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.get_json()["count"] == 2
    statuses = [
        s.status for s in RegistrationSubmission.query.order_by(RegistrationSubmission.id)
    ]
    assert statuses == [SubmissionStatus.APPROVED, SubmissionStatus.APPROVED,
                        SubmissionStatus.PENDING]

    again = client.post(
        "/api/events/admin/submissions/bulk-approve",
        json={"submission_ids": [subs[0].id]},
        headers=auth_headers,
    )
    assert again.get_json()["count"] == 0

    empty = client.post("/api/events/admin/submissions/bulk-approve",
                        json={"submission_ids": []}, headers=auth_headers)
    assert empty.status_code == 400


def test_mark_attendance_and_stats(client, admin, auth_headers, pending_form, make_user):
    first = submit_as(pending_form, make_user())
    second = submit_as(pending_form, make_user())

    pending = client.patch(
        f"/api/events/admin/submissions/{first.id}/attendance",
        json={"attended": True},
        headers=auth_headers,
    )
    assert pending.status_code == 400

    submission_service.bulk_approve([first.id, second.id], admin.id)

    present = client.patch(
        f"/api/events/admin/submissions/{first.id}/attendance",
        json={"attended": True},
        headers=auth_headers,
    )
    assert present.status_code == 200
    assert present.get_json()["submission"]["attended"] is True

    client.patch(
        f"/api/events/admin/submissions/{second.id}/attendance",
        json={"attended": False},
        headers=auth_headers,
    )

    stats = client.get(
        f"/api/events/admin/attendance/{pending_form.event_id}", headers=auth_headers
    ).get_json()["stats"]
    assert stats == {
        "total_submissions": 2,
        "approved": 2,
        "attended": 1,
        "absent": 1,
        "attendance_rate": 50.0,
    }


def test_attendance_requires_flag(client, auth_headers, pending_form, student):
    submission = submit_as(pending_form, student)
    response = client.patch(
        f"/api/events/admin/submissions/{submission.id}/attendance",
        json={},
        headers=auth_headers,
    )
    assert response.status_code == 400


def test_attendance_stats_answers_json_on_unexpected_errors(client, auth_headers, make_event,
                                                             monkeypatch):
    event = make_event()

    def broken(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(submission_service, "get_attendance_stats", broken)

    response = client.get(f"/api/events/admin/attendance/{event.id}", headers=auth_headers)

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "message": "Error fetching attendance stats"}
