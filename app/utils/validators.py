"""
Upload validation for seller documents and product images.

Only metadata is checked (declared mimetype, size, original filename); the
bytes themselves are never inspected. Nothing here touches the filesystem.
"""
import os
import re
import secrets
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

ALLOWED_FILE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "application/pdf": ".pdf",
}

MAX_FILE_SIZE = 5 * 1024 * 1024
MAX_FILES_PER_UPLOAD = 5

DANGEROUS_EXTENSIONS = (".exe", ".bat", ".cmd", ".scr", ".pif", ".vbs", ".js", ".jar")

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


@dataclass
class FileCandidate:
    mimetype: str
    size: int
    original_filename: str
    storage_path: Optional[str] = None


@dataclass
class FileValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class BatchValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    valid_files: List[FileCandidate] = field(default_factory=list)


def validate_file_type(mimetype: str) -> bool:
    return mimetype in ALLOWED_FILE_TYPES


def validate_file_size(file_size: int) -> bool:
    return file_size <= MAX_FILE_SIZE


def has_dangerous_extension(filename: str) -> bool:
    return os.path.splitext(filename or "")[1].lower() in DANGEROUS_EXTENSIONS


def validate_file(file: Optional[FileCandidate]) -> FileValidationResult:
    """Check one upload and report every rule it breaks."""
    if file is None:
        return FileValidationResult(is_valid=False, errors=["No file provided"])

    errors = []
    if not validate_file_type(file.mimetype):
        errors.append(f"Invalid file type. Allowed types: {', '.join(ALLOWED_FILE_TYPES)}")

    if not validate_file_size(file.size):
        errors.append(f"File too large. Maximum size: {MAX_FILE_SIZE // (1024 * 1024)}MB")

    if has_dangerous_extension(file.original_filename):
        errors.append("File type not allowed for security reasons")

    return FileValidationResult(is_valid=not errors, errors=errors)


def validate_batch(files: Optional[Sequence[Optional[FileCandidate]]]) -> BatchValidationResult:
    """
    Validate an upload batch.

    The count limit is policy: six individually valid files still fail.
    Per-file errors are prefixed with the 1-based position of the file.
    """
    if not files:
        return BatchValidationResult(is_valid=False, errors=["No files provided"])

    errors = []
    valid_files = []

    if len(files) > MAX_FILES_PER_UPLOAD:
        errors.append(f"Maximum {MAX_FILES_PER_UPLOAD} files allowed per upload")

    for index, file in enumerate(files, start=1):
        result = validate_file(file)
        if result.is_valid:
            valid_files.append(file)
        else:
            errors.append(f"File {index}: {', '.join(result.errors)}")

    return BatchValidationResult(is_valid=not errors, errors=errors, valid_files=valid_files)


def generate_secure_filename(original_name: str, mimetype: str) -> str:
    """<unix-ms>_<random hex><ext>; the client-supplied name is never reused."""
    timestamp = int(time.time() * 1000)
    token = secrets.token_hex(8)
    extension = ALLOWED_FILE_TYPES.get(mimetype) or os.path.splitext(original_name or "")[1].lower()
    return f"{timestamp}_{token}{extension}"


def format_file_size(num_bytes: int) -> str:
    if num_bytes == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = 0
    while num_bytes >= 1024 ** (i + 1) and i < len(units) - 1:
        i += 1
    value = round(num_bytes / 1024 ** i, 2)
    return f"{value:g} {units[i]}"


def validate_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(phone or ""))
