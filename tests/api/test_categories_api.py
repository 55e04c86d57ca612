def test_create_and_list_categories(client, auth_headers):
    response = client.post(
        "/api/categories/", json={"name": "Hackathons", "description": "Build things"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.get_json()["category"]["slug"] == "hackathons"

    listed = client.get("/api/categories/").get_json()["categories"]
    assert [c["name"] for c in listed] == ["Hackathons"]


def test_duplicate_category(client, auth_headers):
    client.post("/api/categories/", json={"name": "Talks"}, headers=auth_headers)
    response = client.post("/api/categories/", json={"name": "Talks"}, headers=auth_headers)
    assert response.status_code == 409


def test_category_requires_admin(client, student_headers):
    response = client.post("/api/categories/", json={"name": "Talks"}, headers=student_headers)
    assert response.status_code == 403


def test_category_validation(client, auth_headers):
    response = client.post("/api/categories/", json={"name": ""}, headers=auth_headers)
    assert response.status_code == 400


def test_event_with_category(client, auth_headers):
    category = client.post(
        "/api/categories/", json={"name": "Workshops"}, headers=auth_headers
    ).get_json()["category"]

    response = client.post(
        "/api/events/",
        json={
            "title": "Git Workshop",
            "description": "Branching and rebasing",
            "location": "Lab 1",
            "event_type": "WORKSHOP",
            "start_date": "2030-01-10T09:00:00Z",
            "end_date": "2030-01-10T12:00:00Z",
            "category_id": category["id"],
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.get_json()["event"]["category"]["slug"] == "workshops"
