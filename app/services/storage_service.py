import httpx
from app.config import get_settings
from app.utils.logger import logger


class StorageError(Exception):
    """Raised when Supabase Storage rejects an upload."""


def _auth_headers(content_type: str = "application/json") -> dict:
    settings = get_settings()
    return {
        "Authorization": f"Bearer {settings.supabase_service_role_key}",
        "Content-Type": content_type,
    }


def resume_object_path(student_id: str, timestamp_ms: int, extension: str = "pdf") -> str:
    """Object path inside the resumes bucket: <student>/<millis>.<ext>"""
    return f"{student_id}/{timestamp_ms}.{extension}"


def get_public_url(object_path: str) -> str:
    settings = get_settings()
    return f"{settings.supabase_url}/storage/v1/object/public/{settings.resume_bucket}/{object_path}"


async def upload_object(object_path: str, content: bytes, content_type: str) -> str:
    """Upload bytes to the resumes bucket. Returns the public URL."""
    settings = get_settings()
    url = f"{settings.supabase_url}/storage/v1/object/{settings.resume_bucket}/{object_path}"

    async with httpx.AsyncClient() as client:
        resp = await client.post(url, headers=_auth_headers(content_type), content=content, timeout=30.0)

    if resp.status_code >= 300:
        logger.error(f"Failed to upload storage object {object_path}: {resp.status_code} {resp.text}")
        raise StorageError(f"Upload failed with status {resp.status_code}")

    logger.info(f"Uploaded storage object: {object_path}")
    return get_public_url(object_path)


async def delete_object(object_path: str) -> bool:
    """Delete an object from the resumes bucket. Returns True on success."""
    settings = get_settings()
    url = f"{settings.supabase_url}/storage/v1/object/{settings.resume_bucket}"

    try:
        async with httpx.AsyncClient() as client:
            resp = await client.request(
                "DELETE",
                url,
                headers=_auth_headers(),
                json={"prefixes": [object_path]},
            )
    except httpx.HTTPError as e:
        logger.error(f"Failed to delete storage object {object_path}: {e}")
        return False

    if resp.status_code < 300:
        logger.info(f"Deleted storage object: {object_path}")
        return True
    logger.error(f"Failed to delete storage object {object_path}: {resp.status_code} {resp.text}")
    return False
