"""API tests for the dashboard session: selection, panel loads and toasts."""

from datetime import date

from app.models.job_application import JobApplication
from app.routes import session as session_routes
from app.services.session_state import sessions
from conftest import auth_headers


class TestSelection:

    async def test_student_starts_on_own_records(self, client, student_headers):
        body = (await client.get("/api/session", headers=student_headers)).json()
        assert body["studentId"] == "student-sam"

    async def test_staff_selects_student_and_month(self, client, coach_headers, add_profile):
        await add_profile("student-sam")
        body = (await client.get("/api/session", headers=coach_headers)).json()
        assert body["studentId"] is None

        resp = await client.put(
            "/api/session", headers=coach_headers, json={"student_id": "student-sam", "month": "2024-03"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["changed"] is True
        assert body["studentId"] == "student-sam"
        assert body["month"] == "2024-03"
        assert body["generation"] == 2

    async def test_student_cannot_select_someone_else(self, client, student_headers, add_profile):
        await add_profile("student-other")
        resp = await client.put("/api/session", headers=student_headers, json={"student_id": "student-other"})
        assert resp.status_code == 403

    async def test_bad_month_rejected(self, client, student_headers):
        resp = await client.put("/api/session", headers=student_headers, json={"month": "2024-13"})
        assert resp.status_code == 400
        toasts = (await client.get("/api/session/toasts", headers=student_headers)).json()["toasts"]
        assert [t["type"] for t in toasts] == ["error"]


class TestPanels:

    async def test_unknown_panel(self, client, student_headers):
        resp = await client.get("/api/session/panels/weather", headers=student_headers)
        assert resp.status_code == 404

    async def test_staff_must_pick_a_student(self, client, coach_headers):
        resp = await client.get("/api/session/panels/overview", headers=coach_headers)
        assert resp.status_code == 400

    async def test_month_switch_replaces_overview(self, client, coach_headers, add_profile, session_factory):
        await add_profile("student-sam")
        async with session_factory() as db:
            db.add(JobApplication(student_id="student-sam", company_name="Acme", position_title="Engineer",
                                  application_date=date(2024, 3, 4)))
            await db.commit()

        await client.put("/api/session", headers=coach_headers, json={"student_id": "student-sam", "month": "2024-03"})
        march = (await client.get("/api/session/panels/seed", headers=coach_headers)).json()
        assert march["stale"] is False
        assert march["data"]["activity"]["applications"] == 1

        await client.put("/api/session", headers=coach_headers, json={"month": "2024-04"})
        state = (await client.get("/api/session", headers=coach_headers)).json()
        assert state["panels"] == {}

        april = (await client.get("/api/session/panels/seed", headers=coach_headers)).json()
        assert april["month"] == "2024-04"
        assert april["data"]["activity"]["applications"] == 0

        april_progress = (await client.get("/api/session/panels/progress", headers=coach_headers)).json()
        assert april_progress["data"]["start"] == "2024-04-01"
        assert april_progress["data"]["end"] == "2024-04-30"
        assert april_progress["data"]["metrics"]["totalApplications"] == 0

        await client.put("/api/session", headers=coach_headers, json={"month": "2024-03"})
        march_progress = (await client.get("/api/session/panels/progress", headers=coach_headers)).json()
        assert march_progress["data"]["start"] == "2024-03-01"
        assert march_progress["data"]["end"] == "2024-03-31"
        assert march_progress["data"]["metrics"]["totalApplications"] == 1

    async def test_load_finishing_after_switch_is_discarded(self, client, coach_headers, add_profile, monkeypatch):
        await add_profile("student-sam")
        await client.put("/api/session", headers=coach_headers, json={"student_id": "student-sam", "month": "2024-03"})

        async def slow_progress(db, student, month):
            # The viewer switches month while this fetch is in flight
            sessions.get("coach-carol").select_month("2024-04")
            return {"month": month}

        monkeypatch.setitem(session_routes.PANEL_LOADERS, "progress", slow_progress)
        body = (await client.get("/api/session/panels/progress", headers=coach_headers)).json()

        assert body["stale"] is True
        assert body["month"] == "2024-04"
        assert body["data"] is None
        state = (await client.get("/api/session", headers=coach_headers)).json()
        assert "progress" not in state["panels"]


class TestToasts:

    async def test_success_then_drained(self, client, student_headers):
        await client.put("/api/career-goals/student-sam", headers=student_headers, json={})
        first = (await client.get("/api/session/toasts", headers=student_headers)).json()["toasts"]
        second = (await client.get("/api/session/toasts", headers=student_headers)).json()["toasts"]
        assert [t["message"] for t in first] == ["Career goals saved successfully"]
        assert second == []

    async def test_toasts_are_per_viewer(self, client, student_headers):
        other = auth_headers("student-other")
        await client.get("/api/career-goals/student-sam", headers=other)  # forbidden
        assert (await client.get("/api/session/toasts", headers=student_headers)).json()["toasts"] == []
        assert len((await client.get("/api/session/toasts", headers=other)).json()["toasts"]) == 1

    async def test_unauthenticated_failures_push_nothing(self, client):
        resp = await client.get("/api/session")
        assert resp.status_code == 401
