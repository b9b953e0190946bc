def test_login_returns_token_and_user(client):
    resp = client.post("/api/auth/login", json={"username": "worker", "password": "Worker1!"})

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["token"]
    assert body["role"] == "worker"
    assert body["user"]["firstName"] == "Worker"
    assert body["user"]["contractType"] == "UOP"


def test_login_with_bad_password_is_401(client):
    resp = client.post("/api/auth/login", json={"username": "worker", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Invalid username or password"}


def test_requests_without_token_are_401(client):
    assert client.get("/api/projects").status_code == 401
    assert client.get("/api/projects", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_worker_cannot_list_users(client, auth_header):
    resp = client.get("/api/users", headers=auth_header("worker"))

    assert resp.status_code == 403
    assert "message" in resp.get_json()


def test_director_user_lifecycle(client, auth_header):
    headers = auth_header("director")
    created = client.post(
        "/api/users",
        headers=headers,
        json={
            "username": "olena",
            "email": "olena@example.com",
            "firstName": "Olena",
            "lastName": "Shevchenko",
            "password": "Secret12!",
            "confirmPassword": "Secret12!",
            "role": "MANAGER",
            "contractType": "b2b",
            "language": "UA",
            "b2bHourlyNetRate": 120,
        },
    )
    assert created.status_code == 201
    user = created.get_json()
    assert user["role"] == "manager"
    assert user["passwordChangeRequired"] is True

    updated = client.put(f"/api/users/{user['id']}", headers=headers, json={"lastName": "Koval"})
    assert updated.get_json()["lastName"] == "Koval"
    assert updated.get_json()["email"] == "olena@example.com"

    assert client.delete(f"/api/users/{user['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/users/{user['id']}", headers=headers).status_code == 404


def test_create_user_validation_error_is_400(client, auth_header):
    resp = client.post(
        "/api/users",
        headers=auth_header("director"),
        json={"username": "x", "email": "bad", "firstName": "X", "lastName": "Y", "password": "Secret12!"},
    )

    assert resp.status_code == 400


def test_change_my_password(client, auth_header):
    headers = auth_header("worker")
    resp = client.put(
        "/api/users/me/password",
        headers=headers,
        json={"oldPassword": "Worker1!", "newPassword": "Fresh123!", "confirmPassword": "Fresh123!"},
    )

    assert resp.status_code == 204
    relogin = client.post("/api/auth/login", json={"username": "worker", "password": "Fresh123!"})
    assert relogin.status_code == 200


def test_deactivated_user_token_stops_working(client, auth_header):
    worker_headers = auth_header("worker")
    client.put("/api/users/3", headers=auth_header("director"), json={"isActive": False})

    assert client.get("/api/time-entries", headers=worker_headers).status_code == 401


def test_time_entry_flow(client, auth_header):
    worker = auth_header("worker")
    created = client.post(
        "/api/time-entries",
        headers=worker,
        json={"projectId": 1, "taskId": 1, "date": "2024-03-05", "hoursFrom": "08:00", "hoursTo": "12:00"},
    )
    assert created.status_code == 201
    entry = created.get_json()
    assert entry["totalHours"] == 4.0
    assert entry["status"] == "SUBMITTED"
    assert entry["hoursFrom"] == "08:00"

    client.post(
        "/api/time-entries",
        headers=worker,
        json={"projectId": 1, "taskId": 1, "date": "2024-03-05", "totalHours": "3,5"},
    )

    month = client.get("/api/time-entries?year=2024&month=3", headers=worker).get_json()
    assert len(month) == 2

    calendar = client.get("/api/calendar/2024/3", headers=worker).get_json()
    assert calendar["days"]["2024-03-05"]["totalHours"] == 7.5
    assert calendar["days"]["2024-03-05"]["hasEntry"] is True
    assert calendar["days"]["2024-03-06"]["hasEntry"] is False
    assert len(calendar["days"]) == 31

    updated = client.put(f"/api/time-entries/{entry['id']}", headers=worker, json={"description": "site visit"})
    assert updated.get_json()["description"] == "site visit"

    approved = client.put(f"/api/time-entries/{entry['id']}/approve", headers=auth_header("manager"))
    assert approved.get_json()["status"] == "APPROVED"
    assert approved.get_json()["approvedBy"] == 2

    assert client.delete(f"/api/time-entries/{entry['id']}", headers=worker).status_code == 403


def test_time_entry_validation_and_not_found(client, auth_header):
    worker = auth_header("worker")

    too_long = client.post(
        "/api/time-entries", headers=worker, json={"projectId": 1, "date": "2024-03-05", "totalHours": 30}
    )
    assert too_long.status_code == 400

    missing = client.put("/api/time-entries/999", headers=worker, json={"totalHours": 2})
    assert missing.status_code == 404


def test_worker_cannot_approve(client, auth_header):
    worker = auth_header("worker")
    entry = client.post(
        "/api/time-entries", headers=worker, json={"projectId": 1, "date": "2024-03-05", "totalHours": 2}
    ).get_json()

    assert client.put(f"/api/time-entries/{entry['id']}/reject", headers=worker).status_code == 403


def test_user_month_endpoint_respects_ownership(client, auth_header):
    assert client.get("/api/time-entries/user/4/month/2024/3", headers=auth_header("worker")).status_code == 403
    assert client.get("/api/time-entries/user/3/month/2024/3", headers=auth_header("manager")).status_code == 200


def test_project_and_task_endpoints(client, auth_header):
    manager = auth_header("manager")
    created = client.post(
        "/api/projects",
        headers=manager,
        json={
            "name": "Harbour",
            "number": "31000-01",
            "tasks": [{"title": "Piles", "number": "31000-P", "billingType": "UNIT", "unitPrice": 40, "unitName": "pcs"}],
            "memberIds": [3],
        },
    )
    assert created.status_code == 201
    project = created.get_json()
    assert project["managerId"] == 2
    assert project["tasks"][0]["billingType"] == "UNIT"
    assert project["memberIds"] == [3]

    task = client.post(
        f"/api/tasks/project/{project['id']}", headers=manager, json={"title": "Survey", "number": "31000-S"}
    )
    assert task.status_code == 201
    task_id = task.get_json()["id"]

    renamed = client.put(f"/api/tasks/{task_id}", headers=manager, json={"title": "Survey 2"})
    assert renamed.get_json()["title"] == "Survey 2"
    assert renamed.get_json()["number"] == "31000-S"

    bad = client.post(f"/api/tasks/project/{project['id']}", headers=manager, json={"title": "X", "number": "99-X"})
    assert bad.status_code == 400

    client.put(f"/api/projects/{project['id']}/members", headers=manager, json={"userIds": [3, 4]})
    members = client.get(f"/api/projects/{project['id']}/members", headers=manager).get_json()
    assert [m["username"] for m in members] == ["worker", "other"]

    listed = client.get(f"/api/tasks/project/{project['id']}", headers=auth_header("worker")).get_json()
    assert {t["number"] for t in listed} == {"31000-P", "31000-S"}

    assert client.delete(f"/api/tasks/{task_id}", headers=manager).status_code == 204
    assert client.delete(f"/api/projects/{project['id']}", headers=manager).status_code == 204
    assert client.get(f"/api/projects/{project['id']}", headers=manager).status_code == 404


def test_update_project_is_partial(client, auth_header):
    resp = client.put("/api/projects/1", headers=auth_header("director"), json={"description": "Main span"})

    body = resp.get_json()
    assert body["name"] == "Bridge"
    assert body["description"] == "Main span"
    assert len(body["tasks"]) == 3


def test_worker_cannot_create_project(client, auth_header):
    resp = client.post("/api/projects", headers=auth_header("worker"), json={"name": "X", "number": "1"})

    assert resp.status_code == 403


def test_monthly_report_endpoint(client, auth_header):
    worker = auth_header("worker")
    client.post("/api/time-entries", headers=worker, json={"projectId": 1, "date": "2024-03-05", "totalHours": 10})

    report = client.get("/api/reports/monthly?year=2024&month=3&currency=USD", headers=worker).get_json()

    assert report["currency"] == "USD"
    assert report["totals"]["totalHours"] == 10.0
    assert report["totals"]["totalCost"] == 75.0
    assert report["totals"]["formattedCost"] == "$75.00"
    assert len(report["items"]) == 1


def test_unsupported_currency_is_400(client, auth_header):
    resp = client.get("/api/reports/monthly?year=2024&month=3&currency=EUR", headers=auth_header("worker"))

    assert resp.status_code == 400


def test_non_finite_numbers_are_400(client, auth_header):
    worker = auth_header("worker")
    headers = {**worker, "Content-Type": "application/json"}

    nan_hours = client.post(
        "/api/time-entries", headers=headers, data='{"projectId": 1, "date": "2024-03-05", "totalHours": NaN}'
    )
    endless = client.post(
        "/api/time-entries",
        headers=headers,
        data='{"projectId": 1, "taskId": 2, "date": "2024-03-05", "quantity": Infinity}',
    )

    assert nan_hours.status_code == 400
    assert endless.status_code == 400
    assert client.get("/api/time-entries?year=2024&month=3", headers=worker).get_json() == []


def test_numeric_date_and_time_are_400(client, auth_header):
    worker = auth_header("worker")

    numeric_date = client.post(
        "/api/time-entries", headers=worker, json={"projectId": 1, "date": 20240305, "totalHours": 2}
    )
    numeric_time = client.post(
        "/api/time-entries",
        headers=worker,
        json={"projectId": 1, "date": "2024-03-05", "hoursFrom": 8, "hoursTo": 12},
    )

    assert numeric_date.status_code == 400
    assert numeric_time.status_code == 400
