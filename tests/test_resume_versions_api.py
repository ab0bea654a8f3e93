"""API tests for the resume version workflow (storage monkeypatched)."""

import pytest

from app.services import storage_service
from conftest import auth_headers

PDF = b"%PDF-1.4\n%fake resume\n"


@pytest.fixture
def storage(monkeypatch):
    """Record storage calls instead of talking to Supabase"""
    calls = {"uploaded": [], "deleted": []}

    async def fake_upload(object_path, content, content_type):
        calls["uploaded"].append(object_path)
        return storage_service.get_public_url(object_path)

    async def fake_delete(object_path):
        calls["deleted"].append(object_path)
        return True

    monkeypatch.setattr(storage_service, "upload_object", fake_upload)
    monkeypatch.setattr(storage_service, "delete_object", fake_delete)
    return calls


async def upload(client, headers, student_id="student-sam", content=PDF,
                 filename="resume.pdf", content_type="application/pdf"):
    return await client.post(
        f"/api/resume-versions/{student_id}/upload",
        headers=headers,
        files={"file": (filename, content, content_type)},
    )


async def drain_toasts(client, headers):
    resp = await client.get("/api/session/toasts", headers=headers)
    assert resp.status_code == 200
    return resp.json()["toasts"]


async def list_versions(client, headers, student_id="student-sam"):
    resp = await client.get(f"/api/resume-versions/{student_id}", headers=headers)
    assert resp.status_code == 200
    return resp.json()["versions"]


class TestUpload:

    async def test_version_numbers_strictly_increase(self, client, student_headers, storage):
        numbers = []
        for _ in range(3):
            resp = await upload(client, student_headers)
            assert resp.status_code == 200
            numbers.append(resp.json()["version"]["versionNumber"])
        assert numbers == [1, 2, 3]

        # Deleting the newest and uploading again still exceeds what is left
        versions = await list_versions(client, student_headers)
        newest = versions[0]
        await client.delete(f"/api/resume-versions/versions/{newest['id']}", headers=student_headers)
        resp = await upload(client, student_headers)
        remaining = [v["versionNumber"] for v in await list_versions(client, student_headers)]
        assert resp.json()["version"]["versionNumber"] > max(remaining[1:])

    async def test_upload_stores_pending_version(self, client, student_headers, storage):
        resp = await upload(client, student_headers)
        version = resp.json()["version"]
        assert version["status"] == "pending"
        assert version["fileUrl"].startswith("https://project.supabase.co/storage/v1/object/public/resumes/student-sam/")
        assert storage["uploaded"][0].endswith(".pdf")

        toasts = await drain_toasts(client, student_headers)
        assert [t["type"] for t in toasts] == ["success"]

    async def test_wrong_type_rejected_with_one_toast(self, client, student_headers, storage):
        await upload(client, student_headers)
        await drain_toasts(client, student_headers)

        resp = await upload(client, student_headers, content=b"PK\x03\x04", filename="resume.docx",
                            content_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document")
        assert resp.status_code == 400

        toasts = await drain_toasts(client, student_headers)
        assert len(toasts) == 1
        assert toasts[0]["type"] == "error"
        assert toasts[0]["message"] == "Please upload a PDF file"
        assert len(await list_versions(client, student_headers)) == 1
        assert len(storage["uploaded"]) == 1

    async def test_oversized_rejected_with_one_toast(self, client, student_headers, storage):
        resp = await upload(client, student_headers, content=b"0" * (10 * 1024 * 1024 + 1))
        assert resp.status_code == 400

        toasts = await drain_toasts(client, student_headers)
        assert [t["type"] for t in toasts] == ["error"]
        assert toasts[0]["message"] == "File size must be less than 10MB"
        assert await list_versions(client, student_headers) == []
        assert storage["uploaded"] == []

    async def test_storage_failure_is_bad_gateway(self, client, student_headers, monkeypatch):
        async def failing_upload(object_path, content, content_type):
            raise storage_service.StorageError("Upload failed with status 500")

        monkeypatch.setattr(storage_service, "upload_object", failing_upload)
        resp = await upload(client, student_headers)
        assert resp.status_code == 502
        assert await list_versions(client, student_headers) == []

    async def test_student_cannot_upload_for_someone_else(self, client, student_headers, storage):
        resp = await upload(client, student_headers, student_id="student-other")
        assert resp.status_code == 403
        assert storage["uploaded"] == []


class TestReviewAndDelete:

    async def test_coach_rejects_with_feedback(self, client, student_headers, coach_headers, storage):
        version = (await upload(client, student_headers)).json()["version"]

        resp = await client.post(
            f"/api/resume-versions/versions/{version['id']}/review",
            headers=coach_headers,
            json={"approved": False},
        )
        assert resp.status_code == 400

        resp = await client.post(
            f"/api/resume-versions/versions/{version['id']}/review",
            headers=coach_headers,
            json={"approved": False, "feedback": "Quantify your impact"},
        )
        assert resp.status_code == 200
        reviewed = resp.json()["version"]
        assert reviewed["status"] == "rejected"
        assert reviewed["feedback"] == "Quantify your impact"
        assert reviewed["reviewedBy"] == "coach-carol"

    async def test_student_cannot_review(self, client, student_headers, storage):
        version = (await upload(client, student_headers)).json()["version"]
        resp = await client.post(
            f"/api/resume-versions/versions/{version['id']}/review",
            headers=student_headers,
            json={"approved": True},
        )
        assert resp.status_code == 403

    async def test_row_deleted_even_when_storage_delete_fails(self, client, student_headers, storage, monkeypatch):
        version = (await upload(client, student_headers)).json()["version"]

        async def failing_delete(object_path):
            return False

        monkeypatch.setattr(storage_service, "delete_object", failing_delete)
        resp = await client.delete(f"/api/resume-versions/versions/{version['id']}", headers=student_headers)
        assert resp.status_code == 200
        assert await list_versions(client, student_headers) == []

    async def test_other_student_cannot_list(self, client, student_headers, storage):
        await upload(client, student_headers)
        resp = await client.get("/api/resume-versions/student-sam", headers=auth_headers("student-other"))
        assert resp.status_code == 403
