"""
Upload service for resumes, work samples, category images and job logos.

Files go through Django's default storage, which is S3 when USE_S3_STORAGE
is enabled and the local filesystem otherwise. Every stored file yields a
public URL and a preview URL.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple
from urllib.parse import unquote, urlparse

from django.conf import settings
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile
from django.utils.text import get_valid_filename

from config.storage import is_s3_enabled

from .errors import BadRequest

logger = logging.getLogger(__name__)


class UploadFolder:
    EMPLOYEE_RESUME = "EMPLOYEE_RESUME"
    EMPLOYEE_WORK_SAMPLE = "EMPLOYEE_WORK_SAMPLE"
    CATEGORY_LOGO = "CATEGORY_LOGO"
    JOB_POST_LOGO = "JOB_POST_LOGO"


IMAGE_TYPES = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/webp': '.webp',
    'image/svg+xml': '.svg',
}

DOCUMENT_TYPES = {
    'application/pdf': '.pdf',
    'application/msword': '.doc',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document': '.docx',
}

ALLOWED_TYPES_BY_FOLDER = {
    UploadFolder.EMPLOYEE_RESUME: DOCUMENT_TYPES,
    UploadFolder.EMPLOYEE_WORK_SAMPLE: {**DOCUMENT_TYPES, **IMAGE_TYPES},
    UploadFolder.CATEGORY_LOGO: IMAGE_TYPES,
    UploadFolder.JOB_POST_LOGO: IMAGE_TYPES,
}

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


@dataclass(frozen=True)
class StoredFiles:
    public_urls: List[str] = field(default_factory=list)
    preview_urls: List[str] = field(default_factory=list)

    @property
    def first(self) -> Tuple[Optional[str], Optional[str]]:
        if not self.public_urls:
            return None, None
        return self.public_urls[0], self.preview_urls[0]


def validate_upload_file(file: UploadedFile, folder: str) -> None:
    """Raise BadRequest if the file is too large or of a type the folder does not accept."""
    if file.size > MAX_FILE_SIZE:
        raise BadRequest(f"File too large. Maximum size is {MAX_FILE_SIZE // (1024 * 1024)} MB")

    allowed = ALLOWED_TYPES_BY_FOLDER.get(folder, {})
    if file.content_type not in allowed:
        raise BadRequest(f"Invalid file type: {file.content_type} for {folder}.")


def upload_files(files: Iterable[UploadedFile], folder: str, name: str) -> StoredFiles:
    """
    Validate and store files under <UPLOAD_ROOT_FOLDER>/<folder>/<name>_<n><ext>.

    All files are validated before any of them is written.
    """
    files = list(files or [])
    for file in files:
        validate_upload_file(file, folder)

    public_urls, preview_urls = [], []
    base_name = get_valid_filename(name) or "file"
    for index, file in enumerate(files, start=1):
        extension = os.path.splitext(file.name)[1].lower() or ALLOWED_TYPES_BY_FOLDER[folder][file.content_type]
        path = f"{settings.UPLOAD_ROOT_FOLDER}/{folder}/{base_name}_{index}{extension}"

        if default_storage.exists(path):
            default_storage.delete(path)
        saved_path = default_storage.save(path, file)
        url = default_storage.url(saved_path)

        public_urls.append(url)
        preview_urls.append(_preview_url(url))
        logger.info(f"Stored upload {saved_path} ({file.size} bytes)")

    if files and not is_s3_enabled():
        logger.warning("S3 not configured. Using local storage for uploads.")

    return StoredFiles(public_urls=public_urls, preview_urls=preview_urls)


def replace_file(
    existing_url: Optional[str],
    files: Iterable[UploadedFile],
    folder: str,
    name: str,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Swap a single stored file for the first of `files`.

    With no new file the existing URL is kept and its preview URL is
    recomputed. The old file is deleted only after the new one is stored.
    """
    files = list(files or [])
    if not files:
        return existing_url, (_preview_url(existing_url) if existing_url else None)

    public_url, preview_url = upload_files(files[:1], folder, name).first
    if existing_url and existing_url != public_url:
        delete_file(existing_url)
    return public_url, preview_url


def delete_file(url: Optional[str]) -> bool:
    """Delete a stored file by its public URL. Failures are logged, never raised."""
    if not url:
        return False
    path = _path_from_url(url)
    try:
        if default_storage.exists(path):
            default_storage.delete(path)
            return True
    except Exception as e:
        logger.warning(f"Failed to delete stored file {path}: {e}")
    return False


def _preview_url(url: str) -> str:
    # Both backends serve files inline, so the preview link is the public link.
    return url


def _path_from_url(url: str) -> str:
    path = unquote(urlparse(url).path)
    media_url = getattr(settings, 'MEDIA_URL', '/media/')
    if path.startswith(media_url):
        path = path[len(media_url):]
    return path.lstrip('/')
