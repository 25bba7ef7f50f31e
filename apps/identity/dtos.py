"""DTOs and request/response schemas for the Identity app."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from ninja import Schema
from ninja.orm import create_schema

from .models import AdminProfile, EmployeeProfile, EmployerProfile, User, UserRole


@dataclass(frozen=True)
class SessionDTO:
    """Result of a successful sign-in or registration."""
    token: str
    user: User
    message: str


@dataclass(frozen=True)
class ProfileStatusDTO:
    user: User
    profile_completed: bool
    missing_fields: List[str]


# =============================================================================
# Requests
# =============================================================================

class RegisterOrLoginIn(Schema):
    email: Optional[str] = None
    otp: Optional[str] = None
    google_token: Optional[str] = None


class RegistrationBase(Schema):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    otp: Optional[str] = None
    country_code: Optional[str] = None
    mobile_number: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pincode: Optional[str] = None
    industry: Optional[str] = None
    function_area: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    tc_policy: bool = False


class EmployeeRegisterIn(RegistrationBase):
    gender: Optional[str] = None
    current_ctc: Optional[Decimal] = None
    expected_ctc: Optional[Decimal] = None


class EmployerRegisterIn(RegistrationBase):
    company_name: Optional[str] = None


class LoginIn(Schema):
    email: Optional[str] = None
    password: Optional[str] = None
    otp: Optional[str] = None
    google_token: Optional[str] = None


class ForgotPasswordIn(Schema):
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    otp: Optional[str] = None


class ResetPasswordIn(Schema):
    user_id: Optional[UUID] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    otp: Optional[str] = None


class OnboardUserIn(RegistrationBase):
    role: Optional[str] = None
    alternative_mobile_number: Optional[str] = None
    linkedin_url: Optional[str] = None
    company_name: Optional[str] = None
    skills: List[str] = []
    experience: Optional[int] = None


class UserStatusIn(Schema):
    is_active: bool


# =============================================================================
# Responses
# =============================================================================

class AddressOut(Schema):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pincode: Optional[str] = None


EmployeeProfileOut = create_schema(EmployeeProfile, name='EmployeeProfileOut', exclude=['user', 'created_by'])
EmployerProfileOut = create_schema(EmployerProfile, name='EmployerProfileOut', exclude=['user', 'created_by'])
AdminProfileOut = create_schema(AdminProfile, name='AdminProfileOut', exclude=['user', 'created_by'])


def _related(obj, relation):
    # Reverse one-to-one access raises when the row is missing.
    return getattr(obj, relation, None)


class UserOut(Schema):
    """A user with only the profile that belongs to its role."""
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    auth_provider: str
    country_code: Optional[str] = None
    mobile_number: Optional[str] = None
    alternative_mobile_number: Optional[str] = None
    is_active: bool
    email_verified: bool = False
    created_by: str = ""
    date_joined: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None
    address: Optional[AddressOut] = None
    employee_profile: Optional[EmployeeProfileOut] = None
    employer_profile: Optional[EmployerProfileOut] = None
    admin_profile: Optional[AdminProfileOut] = None

    @staticmethod
    def resolve_email_verified(obj: User) -> bool:
        return obj.email_verified_at is not None

    @staticmethod
    def resolve_address(obj: User):
        return _related(obj, 'address')

    @staticmethod
    def resolve_employee_profile(obj: User):
        return _related(obj, 'employee_profile') if obj.role == UserRole.EMPLOYEE else None

    @staticmethod
    def resolve_employer_profile(obj: User):
        return _related(obj, 'employer_profile') if obj.role == UserRole.EMPLOYER else None

    @staticmethod
    def resolve_admin_profile(obj: User):
        if obj.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.OPERATOR):
            return _related(obj, 'admin_profile')
        return None


def user_payload(user: User) -> dict:
    return UserOut.from_orm(user).model_dump()


def session_payload(session: SessionDTO) -> dict:
    return {"token": session.token, "user": user_payload(session.user)}
