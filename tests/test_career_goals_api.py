"""API tests for career goals and target suggestions."""


class TestCareerGoals:

    async def test_defaults_before_first_save(self, client, student_headers):
        body = (await client.get("/api/career-goals/student-sam", headers=student_headers)).json()
        assert body["goals"] is None
        assert body["defaults"]["weekly_application_goal"] == 5

    async def test_upsert_keeps_one_record(self, client, student_headers):
        first = await client.put(
            "/api/career-goals/student-sam", headers=student_headers, json={"weekly_application_goal": 8},
        )
        second = await client.put(
            "/api/career-goals/student-sam", headers=student_headers, json={"weekly_application_goal": 10},
        )
        assert first.json()["goals"]["id"] == second.json()["goals"]["id"]
        assert second.json()["goals"]["weeklyApplicationGoal"] == 10

    async def test_targets_capped_at_three(self, client, student_headers):
        resp = await client.put(
            "/api/career-goals/student-sam",
            headers=student_headers,
            json={
                "target_roles": ["Data Scientist", "Product Manager", "Data Scientist", "UX Designer", "Chef"],
                "target_industries": ["Healthcare", "Energy", "Retail", "Technology"],
            },
        )
        goals = resp.json()["goals"]
        assert goals["targetRoles"] == ["Data Scientist", "Product Manager", "UX Designer"]
        assert len(goals["targetIndustries"]) == 3

    async def test_campaign_end_before_start(self, client, student_headers):
        resp = await client.put(
            "/api/career-goals/student-sam",
            headers=student_headers,
            json={"campaign_start_date": "2024-05-01", "campaign_end_date": "2024-04-01"},
        )
        assert resp.status_code == 422

    async def test_coach_can_edit_student_goals(self, client, coach_headers):
        resp = await client.put("/api/career-goals/student-sam", headers=coach_headers, json={})
        assert resp.status_code == 200


class TestSuggestions:

    async def test_filtered_and_excluding_selected(self, client, student_headers):
        body = (await client.get(
            "/api/suggestions/target_roles",
            params={"q": "developer", "selected": "Frontend Developer"},
            headers=student_headers,
        )).json()
        assert "Backend Developer" in body["suggestions"]
        assert "Frontend Developer" not in body["suggestions"]
        assert body["maxItems"] == 3

    async def test_full_list_offers_nothing(self, client, student_headers):
        body = (await client.get(
            "/api/suggestions/target_industries",
            params={"selected": "Energy, Retail, Healthcare, Technology"},
            headers=student_headers,
        )).json()
        assert body["selected"] == ["Energy", "Retail", "Healthcare"]
        assert body["suggestions"] == []

    async def test_custom_entry_flag(self, client, student_headers):
        body = (await client.get(
            "/api/suggestions/target_roles", params={"q": "Puppeteer"}, headers=student_headers,
        )).json()
        assert body["isCustom"] is True

    async def test_unknown_field(self, client, student_headers):
        resp = await client.get("/api/suggestions/hobbies", headers=student_headers)
        assert resp.status_code == 404
