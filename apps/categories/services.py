"""
Category services.

Names are normalized before every lookup and write, so "backend dev",
"Backend Dev" and "BACKEND  DEV" all refer to the same category.
"""
import logging
import re
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import Q

from apps.core import storage_service
from apps.core.errors import BadRequest, Conflict, NotFound, ParameterMissing
from apps.core.storage_service import UploadFolder
from apps.identity.models import User

from .dtos import CategoryIn, CategoryUpdateIn
from .models import Category

logger = logging.getLogger(__name__)

CATEGORY_NAME_RE = re.compile(r'^[A-Z]+$')
CATEGORY_EXISTS = "This category already exists."


def normalize_category_name(name: Optional[str]) -> str:
    """Drop all whitespace and uppercase; only letters A-Z may remain."""
    normalized = re.sub(r'\s+', '', name or '').upper()
    if not normalized:
        raise ParameterMissing("Category name is required.")
    if not CATEGORY_NAME_RE.match(normalized):
        raise BadRequest("Category name must contain only letters A-Z.")
    return normalized


def _ensure_name_available(name: str, exclude_id: Optional[UUID] = None) -> None:
    queryset = Category.objects.filter(name=name)
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise Conflict(CATEGORY_EXISTS)


def get_category(category_id: UUID) -> Category:
    category = Category.objects.filter(id=category_id).first()
    if category is None:
        raise NotFound("Category not found.")
    return category


def list_categories(is_active: Optional[bool] = None, search: Optional[str] = None) -> List[Category]:
    queryset = Category.objects.all()
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
    return list(queryset.order_by('-created_at'))


def create_category(payload: CategoryIn, actor: User, image_files: Iterable = ()) -> Category:
    if not payload.name or not payload.description:
        raise ParameterMissing()
    name = normalize_category_name(payload.name)

    image_files = list(image_files or [])
    for file in image_files:
        storage_service.validate_upload_file(file, UploadFolder.CATEGORY_LOGO)
    _ensure_name_available(name)

    image_url, preview_url = storage_service.upload_files(image_files[:1], UploadFolder.CATEGORY_LOGO, name).first
    try:
        with transaction.atomic():
            category = Category.objects.create(
                name=name,
                description=payload.description.strip(),
                image_url=image_url,
                image_preview_url=preview_url,
                created_by=actor,
            )
    except IntegrityError:
        # Lost a race with a concurrent create of the same name.
        storage_service.delete_file(image_url)
        raise Conflict(CATEGORY_EXISTS)

    logger.info(f"Category {name} created by {actor.email}")
    return category


def update_category(category_id: UUID, payload: CategoryUpdateIn, actor: User) -> Category:
    category = get_category(category_id)

    if payload.name:
        name = normalize_category_name(payload.name)
        _ensure_name_available(name, exclude_id=category.id)
        category.name = name
    if payload.description:
        category.description = payload.description.strip()
    if payload.is_active is not None:
        category.is_active = payload.is_active
    category.updated_by = actor

    try:
        with transaction.atomic():
            category.save()
    except IntegrityError:
        raise Conflict(CATEGORY_EXISTS)

    logger.info(f"Category {category.name} updated by {actor.email}")
    return category


def replace_category_image(category_id: UUID, image_files: Iterable, actor: User) -> Category:
    category = get_category(category_id)
    image_files = list(image_files or [])
    if not image_files:
        raise ParameterMissing("Image file is required.")

    category.image_url, category.image_preview_url = storage_service.replace_file(
        category.image_url, image_files, UploadFolder.CATEGORY_LOGO, category.name,
    )
    category.updated_by = actor
    category.save(update_fields=['image_url', 'image_preview_url', 'updated_by', 'updated_at'])
    return category


def delete_category(category_id: UUID, actor: User) -> None:
    """Hard delete; the stored image goes with it."""
    category = get_category(category_id)
    image_url = category.image_url
    name = category.name

    category.delete()
    storage_service.delete_file(image_url)
    logger.info(f"Category {name} deleted by {actor.email}")
