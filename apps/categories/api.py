"""
Category API endpoints.

Listing is public; every write requires a SUPER_ADMIN session token.
"""
from typing import Optional
from uuid import UUID
from ninja import Form, Router
from django.http import HttpRequest

from apps.core.responses import action_complete
from apps.identity.permissions import RoleGroups
from apps.identity.security import SessionTokenAuth

from .dtos import CategoryIn, CategoryUpdateIn, category_payload
from . import services

router = Router(tags=["Category"])

super_admin_auth = SessionTokenAuth(RoleGroups.SUPER_ADMIN)


@router.post("/", auth=super_admin_auth)
def create_category(request: HttpRequest, payload: CategoryIn = Form(...)):
    """
    Create a category (multipart). Optional file field: `image`.
    """
    category = services.create_category(payload, request.auth.user, request.FILES.getlist('image'))
    return action_complete("Category added successfully.", {"category": category_payload(category)})


@router.get("/", auth=None)
def list_categories(request: HttpRequest, is_active: Optional[bool] = None, search: Optional[str] = None):
    """
    Query Parameters:
    - is_active: filter by active flag
    - search: matches name or description
    """
    categories = services.list_categories(is_active=is_active, search=search)
    return action_complete("Categories fetched successfully", {
        "category_count": len(categories),
        "categories": [category_payload(c) for c in categories],
    })


@router.put("/{category_id}", auth=super_admin_auth)
def update_category(request: HttpRequest, category_id: UUID, payload: CategoryUpdateIn):
    category = services.update_category(category_id, payload, request.auth.user)
    return action_complete("Category updated successfully.", {"category": category_payload(category)})


@router.post("/{category_id}/image", auth=super_admin_auth)
def replace_category_image(request: HttpRequest, category_id: UUID):
    category = services.replace_category_image(category_id, request.FILES.getlist('image'), request.auth.user)
    return action_complete("Category image updated successfully.", {"category": category_payload(category)})


@router.delete("/{category_id}", auth=super_admin_auth)
def delete_category(request: HttpRequest, category_id: UUID):
    services.delete_category(category_id, request.auth.user)
    return action_complete("Category deleted successfully.")
