"""API tests for the staff student directory and student management."""

from conftest import auth_headers


async def add_roster(add_profile):
    await add_profile("student-ann", cohort="2024-spring")
    await add_profile("student-bo", cohort="2024-fall", status="inactive")
    await add_profile("student-cy", cohort="2024-spring", status="graduated")
    await add_profile("mentor-mo", role="mentor")


class TestStudentDirectory:

    async def test_filters_by_status_and_cohort(self, client, coach_headers, add_profile):
        await add_roster(add_profile)

        body = (await client.get("/api/profiles/students", headers=coach_headers)).json()
        assert [s["id"] for s in body["students"]] == ["student-ann", "student-bo", "student-cy"]
        assert body["cohorts"] == ["2024-fall", "2024-spring"]

        active = (await client.get("/api/profiles/students?status=active", headers=coach_headers)).json()
        assert [o["value"] for o in active["options"]] == ["student-ann"]

        spring = (await client.get("/api/profiles/students?cohort=2024-spring", headers=coach_headers)).json()
        assert {s["id"] for s in spring["students"]} == {"student-ann", "student-cy"}

    async def test_search_matches_name_or_email(self, client, coach_headers, add_profile):
        await add_roster(add_profile)
        by_name = (await client.get("/api/profiles/students?q=ANN", headers=coach_headers)).json()
        assert [s["id"] for s in by_name["students"]] == ["student-ann"]
        by_email = (await client.get("/api/profiles/students?q=student-bo@", headers=coach_headers)).json()
        assert [s["id"] for s in by_email["students"]] == ["student-bo"]

    async def test_sorting(self, client, coach_headers, add_profile):
        await add_roster(add_profile)
        body = (await client.get(
            "/api/profiles/students?sort=cohort&direction=desc", headers=coach_headers,
        )).json()
        assert [s["cohort"] for s in body["students"]] == ["2024-spring", "2024-spring", "2024-fall"]

        resp = await client.get("/api/profiles/students?sort=password", headers=coach_headers)
        assert resp.status_code == 400

    async def test_students_cannot_list(self, client, student_headers):
        resp = await client.get("/api/profiles/students", headers=student_headers)
        assert resp.status_code == 403


class TestBulkUpdate:

    async def test_bulk_status_change(self, client, coach_headers, add_profile):
        await add_roster(add_profile)
        resp = await client.post(
            "/api/profiles/students/bulk",
            headers=coach_headers,
            json={"student_ids": ["student-ann", "student-bo", "mentor-mo"], "status": "graduated"},
        )
        assert resp.status_code == 200
        # Staff profiles are never touched
        assert resp.json()["updated"] == 2

        graduated = (await client.get("/api/profiles/students?status=graduated", headers=coach_headers)).json()
        assert {s["id"] for s in graduated["students"]} == {"student-ann", "student-bo", "student-cy"}

        toasts = (await client.get("/api/session/toasts", headers=coach_headers)).json()["toasts"]
        assert [t["message"] for t in toasts] == ["Successfully updated 2 students"]

    async def test_bulk_cohort_change(self, client, coach_headers, add_profile):
        await add_roster(add_profile)
        resp = await client.post(
            "/api/profiles/students/bulk",
            headers=coach_headers,
            json={"student_ids": ["student-bo"], "cohort": "2025-spring"},
        )
        assert resp.json()["updated"] == 1
        body = (await client.get("/api/profiles/students?cohort=2025-spring", headers=coach_headers)).json()
        assert [s["id"] for s in body["students"]] == ["student-bo"]

    async def test_bulk_requires_a_change(self, client, coach_headers):
        resp = await client.post(
            "/api/profiles/students/bulk", headers=coach_headers, json={"student_ids": ["student-ann"]},
        )
        assert resp.status_code == 400

    async def test_bulk_rejects_unknown_status(self, client, coach_headers):
        resp = await client.post(
            "/api/profiles/students/bulk",
            headers=coach_headers,
            json={"student_ids": ["student-ann"], "status": "expelled"},
        )
        assert resp.status_code == 422

    async def test_students_cannot_bulk_update(self, client, add_profile):
        await add_profile("student-ann")
        resp = await client.post(
            "/api/profiles/students/bulk",
            headers=auth_headers("student-ann"),
            json={"student_ids": ["student-ann"], "status": "inactive"},
        )
        assert resp.status_code == 403


class TestAssignment:

    async def test_update_pushes_success_toast(self, client, coach_headers, add_profile):
        await add_profile("student-ann")
        resp = await client.put(
            "/api/profiles/students/student-ann",
            headers=coach_headers,
            json={"coach_id": "coach-carol", "cohort": "2024-fall", "attention_level": "high"},
        )
        assert resp.status_code == 200
        profile = resp.json()["profile"]
        assert profile["coachId"] == "coach-carol"
        assert profile["cohort"] == "2024-fall"

        toasts = (await client.get("/api/session/toasts", headers=coach_headers)).json()["toasts"]
        assert [(t["type"], t["message"]) for t in toasts] == [("success", "Student updated successfully")]

    async def test_unknown_attention_level(self, client, coach_headers, add_profile):
        await add_profile("student-ann")
        resp = await client.put(
            "/api/profiles/students/student-ann", headers=coach_headers, json={"attention_level": "urgent"},
        )
        assert resp.status_code == 400
