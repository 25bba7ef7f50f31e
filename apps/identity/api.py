"""
Identity API endpoints.

Codes, registration, sign-in, passwords and the super-admin user
directory. Protected routes authenticate with the X-Access-Token header.
"""
from typing import Optional
from uuid import UUID
from ninja import Form, Router
from django.http import HttpRequest

from apps.core.responses import action_complete

from .dtos import (
    EmployeeRegisterIn, EmployerRegisterIn, ForgotPasswordIn, LoginIn, OnboardUserIn,
    RegisterOrLoginIn, ResetPasswordIn, UserStatusIn, session_payload, user_payload,
)
from .otp_service import issue_code
from .permissions import RoleGroups
from .security import SessionTokenAuth
from . import services

router = Router(tags=["Auth"])


# =============================================================================
# One-time codes
# =============================================================================

@router.post("/send-otp", auth=None)
def send_otp(request: HttpRequest, email: Optional[str] = None, action: Optional[str] = None):
    """
    Email a six-character code for `action`.

    Succeeds even when delivery fails; `delivered` reports the outcome.
    """
    issued = issue_code(email, action)
    return action_complete(
        f"OTP for {issued.action} sent successfully!",
        {"delivered": issued.delivered, "expires_at": issued.expires_at},
    )


# =============================================================================
# Registration and sign-in
# =============================================================================

@router.post("/register-or-login", auth=None)
def register_or_login(request: HttpRequest, payload: RegisterOrLoginIn):
    """End-user sign-in with a code or a Google token; unknown emails are registered."""
    session = services.register_or_login(payload, request=request)
    return action_complete(session.message, session_payload(session))


@router.post("/employee/register", auth=None)
def register_employee(request: HttpRequest, payload: EmployeeRegisterIn = Form(...)):
    """
    Register a job seeker (multipart).

    Optional files: `resume_files` and `work_sample_files`.
    """
    session = services.register_employee(
        payload,
        resume_files=request.FILES.getlist('resume_files'),
        work_sample_files=request.FILES.getlist('work_sample_files'),
        request=request,
    )
    return action_complete(session.message, session_payload(session))


@router.post("/employer/register", auth=None)
def register_employer(request: HttpRequest, payload: EmployerRegisterIn = Form(...)):
    session = services.register_employer(payload, request=request)
    return action_complete(session.message, session_payload(session))


@router.post("/login", auth=None)
def login(request: HttpRequest, payload: LoginIn):
    """
    Sign in with a Google token, email + password + code, or email + code.
    """
    session = services.login(payload, request=request)
    return action_complete(session.message, session_payload(session))


# =============================================================================
# Passwords
# =============================================================================

@router.post("/forgot-password", auth=None)
def forgot_password(request: HttpRequest, payload: ForgotPasswordIn):
    services.forgot_password(payload)
    return action_complete("Password updated successfully.")


@router.post("/reset-password", auth=SessionTokenAuth(RoleGroups.PORTAL))
def reset_password(request: HttpRequest, payload: ResetPasswordIn):
    services.reset_password(payload, request.auth)
    return action_complete("Password reset successfully.")


# =============================================================================
# Super admin
# =============================================================================

@router.post("/super-admin/onboard", auth=SessionTokenAuth(RoleGroups.SUPER_ADMIN))
def onboard_user(request: HttpRequest, payload: OnboardUserIn):
    user = services.onboard_user(payload, request.auth)
    return action_complete(f"{user.role} onboarded successfully", {"user": user_payload(user)})


@router.get("/super-admin/users", auth=SessionTokenAuth(RoleGroups.SUPER_ADMIN))
def list_users(
    request: HttpRequest,
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    industry: Optional[str] = None,
    function_area: Optional[str] = None,
    experience: Optional[int] = None,
    mobile_number: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
):
    """
    Query Parameters:
    - role, is_active, mobile_number: exact filters
    - industry, function_area: case-insensitive match on the user's profile
    - experience: years, employees only
    - search: email, first/last name or mobile number
    """
    total, users = services.list_users(
        role=role,
        is_active=is_active,
        industry=industry,
        function_area=function_area,
        experience=experience,
        mobile_number=mobile_number,
        search=search,
        page=page,
        limit=limit,
    )
    return action_complete(
        "Users fetched successfully",
        {"total_count": total, "page": page, "users": [user_payload(u) for u in users]},
    )


@router.patch("/super-admin/users/{user_id}/status", auth=SessionTokenAuth(RoleGroups.SUPER_ADMIN))
def set_user_status(request: HttpRequest, user_id: UUID, payload: UserStatusIn):
    user = services.set_user_status(user_id, payload.is_active, request.auth)
    state = "activated" if user.is_active else "deactivated"
    return action_complete(f"User {state} successfully.", {"user": user_payload(user)})


# =============================================================================
# Profiles
# =============================================================================

@router.get("/users/{user_id}", auth=SessionTokenAuth(RoleGroups.PORTAL))
def get_user_profile(request: HttpRequest, user_id: UUID):
    user = services.get_user_profile(user_id)
    return action_complete("User data fetched successfully.", {"user": user_payload(user)})


@router.get("/users/{user_id}/profile-status", auth=SessionTokenAuth(RoleGroups.PORTAL))
def get_profile_status(request: HttpRequest, user_id: UUID):
    status = services.get_profile_status(user_id)
    return action_complete("Profile fetch successful", {
        "user": user_payload(status.user),
        "profile_completed": status.profile_completed,
        "missing_fields": status.missing_fields,
    })


@router.get("/me", auth=SessionTokenAuth(RoleGroups.ANY))
def get_me(request: HttpRequest):
    """Current authenticated user."""
    return action_complete(data={"user": user_payload(request.auth.user), "role": request.auth.role})
