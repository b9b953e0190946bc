from datetime import date
from decimal import Decimal

from timetracker.entries.model import EntryDraft


def test_login_page_renders(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert b"Remember me" in resp.data


def test_dashboard_requires_login(client):
    resp = client.get("/dashboard")

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")


def test_bad_login_shows_message(client, login):
    resp = login("worker", "wrong")

    assert resp.status_code == 200
    assert b"Invalid username or password" in resp.data


def test_login_then_dashboard_shows_calendar(client, login):
    assert login("worker").status_code == 302

    resp = client.get("/dashboard?year=2024&month=3")

    assert resp.status_code == 200
    assert b"2024-03" in resp.data
    assert b"No entries this month." in resp.data


def test_posting_entry_redirects_back_to_month(client, login, entries_repo):
    login("worker")

    resp = client.post(
        "/entries",
        data={"project_id": "1", "task_id": "1", "work_date": "2024-03-05", "hours": "7,5", "year": "2024", "month": "3"},
    )

    assert resp.status_code == 302
    assert "year=2024" in resp.headers["Location"]
    entries = entries_repo.list_for_user_between(3, start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))
    assert len(entries) == 1

    page = client.get("/dashboard?year=2024&month=3")
    assert b"7.5h" in page.data


def test_invalid_entry_is_flashed(client, login):
    login("worker")

    resp = client.post(
        "/entries",
        data={"project_id": "1", "work_date": "2024-03-05", "hours": "30", "year": "2024", "month": "3"},
        follow_redirects=True,
    )

    assert b"Hours must be between" in resp.data


def test_worker_gets_403_on_admin_pages(client, login):
    login("worker")

    assert client.get("/admin/users").status_code == 403
    assert client.get("/entries/review").status_code == 403


def test_director_sees_user_admin(client, login):
    login("director")

    resp = client.get("/admin/users")

    assert resp.status_code == 200
    assert b"manager@example.com" in resp.data


def test_forced_password_change_redirect(client, login, container, director):
    container.user_service.reset_password(
        actor=director, user_id=3, new_password="Temp1234!", password_confirmation="Temp1234!"
    )

    resp = login("worker", "Temp1234!")
    assert resp.headers["Location"].endswith("/password")
    assert client.get("/dashboard").headers["Location"].endswith("/password")

    resp = client.post(
        "/password",
        data={"old_password": "Temp1234!", "new_password": "Mine1234!", "confirm_password": "Mine1234!"},
    )
    assert resp.headers["Location"].endswith("/dashboard")
    assert client.get("/dashboard").status_code == 200


def test_review_page_approves(client, login, container, worker):
    entry_id = container.entry_service.create_entry(
        actor=worker, draft=EntryDraft(project_id=1, work_date=date(2024, 3, 5), hours=Decimal("8"))
    )
    login("manager")

    assert b"Approve" in client.get("/entries/review").data
    client.post(f"/entries/{entry_id}/approve")

    assert container.entry_service.get_entry(entry_id).status.value == "APPROVED"


def test_projects_page_lists_projects(client, login):
    login("worker")

    resp = client.get("/projects")

    assert resp.status_code == 200
    assert b"20031-00" in resp.data
    assert b"New project" not in resp.data


def test_monthly_report_page_and_export(client, login):
    login("worker")

    page = client.get("/reports/monthly?year=2024&month=3")
    assert page.status_code == 200
    assert "zł".encode() in page.data

    export = client.get("/reports/monthly/export?year=2024&month=3")
    assert export.status_code == 200
    assert export.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def test_logout_clears_session(client, login):
    login("worker")
    client.get("/logout")

    assert client.get("/dashboard").status_code == 302
