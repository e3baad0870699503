from pathlib import Path
from typing import Iterable, List, Tuple
from fastapi import UploadFile
from app.config import settings
from app.utils.logger import logger
from app.utils.validators import FileCandidate, format_file_size, generate_secure_filename


class StorageService:
    """Local-disk storage for uploaded documents and images."""

    @staticmethod
    def upload_root() -> Path:
        root = Path(settings.UPLOAD_DIR)
        root.mkdir(parents=True, exist_ok=True)
        return root

    @staticmethod
    async def read_uploads(files: Iterable[UploadFile]) -> List[Tuple[FileCandidate, bytes]]:
        """Read multipart uploads into memory and describe them for validation."""
        uploads = []
        for file in files or []:
            data = await file.read()
            candidate = FileCandidate(
                mimetype=file.content_type or "application/octet-stream",
                size=len(data),
                original_filename=file.filename or "",
            )
            uploads.append((candidate, data))
        return uploads

    @staticmethod
    def save(candidate: FileCandidate, data: bytes) -> FileCandidate:
        filename = generate_secure_filename(candidate.original_filename, candidate.mimetype)
        path = StorageService.upload_root() / filename
        path.write_bytes(data)
        candidate.storage_path = str(path)
        logger.debug(f"Stored upload {candidate.original_filename!r} as {filename}")
        return candidate

    @staticmethod
    def save_all(uploads: Iterable[Tuple[FileCandidate, bytes]]) -> List[FileCandidate]:
        """Write every upload; if one write fails the ones already written are removed."""
        saved = []
        try:
            for candidate, data in uploads:
                saved.append(StorageService.save(candidate, data))
        except OSError:
            StorageService.cleanup([c.storage_path for c in saved])
            raise
        return saved

    @staticmethod
    def cleanup(file_paths: Iterable[str]) -> None:
        for file_path in file_paths:
            if not file_path:
                continue
            try:
                path = Path(file_path)
                if path.exists():
                    path.unlink()
                    logger.info(f"Deleted file: {file_path}")
            except OSError as e:
                logger.error(f"Error deleting file {file_path}: {e}")

    @staticmethod
    def public_url(file_path: str) -> str:
        return f"{settings.UPLOAD_URL_PREFIX}/{Path(file_path).name}"

    @staticmethod
    def describe(candidates: Iterable[FileCandidate]) -> List[dict]:
        return [
            {
                "filename": Path(c.storage_path).name,
                "original_name": c.original_filename,
                "url": StorageService.public_url(c.storage_path),
                "size": c.size,
                "size_label": format_file_size(c.size),
                "mimetype": c.mimetype,
            }
            for c in candidates
        ]
