from pathlib import Path
from fastapi import UploadFile, HTTPException

ALLOWED_EXTENSIONS = {'.pdf'}
ALLOWED_CONTENT_TYPES = {'application/pdf'}
CHUNK_SIZE = 8192


class ResumeFileHandler:
    """Validate and read resume uploads before anything touches storage"""

    def __init__(self, max_size: int = 10 * 1024 * 1024):
        self.max_size = max_size

    def validate_metadata(self, file: UploadFile) -> str:
        """
        Check filename, type and declared size.

        Returns:
            the lower-case extension without the dot
        """
        if not file.filename:
            raise HTTPException(status_code=400, detail="No filename provided")

        file_ext = Path(file.filename).suffix.lower()
        content_type = (file.content_type or "").lower()
        if file_ext not in ALLOWED_EXTENSIONS or (content_type and 'pdf' not in content_type):
            raise HTTPException(status_code=400, detail="Please upload a PDF file")

        # Content-Length based check before reading anything
        if getattr(file, 'size', None) is not None and file.size > self.max_size:
            raise HTTPException(status_code=400, detail=self._too_large_message())

        return file_ext.lstrip('.')

    async def read_upload(self, file: UploadFile) -> bytes:
        """Read the upload in chunks, enforcing the size limit while streaming"""
        chunks = []
        bytes_read = 0
        while chunk := await file.read(CHUNK_SIZE):
            bytes_read += len(chunk)
            if bytes_read > self.max_size:
                raise HTTPException(status_code=400, detail=self._too_large_message())
            chunks.append(chunk)
        return b"".join(chunks)

    def _too_large_message(self) -> str:
        return f"File size must be less than {self.max_size // (1024 * 1024)}MB"
