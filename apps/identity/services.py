"""
Services for the Identity app.

Every flow validates its input before touching the database, verifies the
one-time code outside of any transaction (so a failed attempt still burns
the code), and only then writes the account records atomically.
"""
import logging
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from django.contrib.auth.signals import user_logged_in
from django.db import transaction
from django.db.models import Q
from django.http import HttpRequest

from apps.core import storage_service
from apps.core.errors import BadRequest, Conflict, Forbidden, NotFound, ParameterMissing, Unauthorized
from apps.core.responses import ResponseMessages
from apps.core.storage_service import UploadFolder

from . import otp_service, passwords
from .dtos import (
    EmployeeRegisterIn, EmployerRegisterIn, ForgotPasswordIn, LoginIn, OnboardUserIn,
    ProfileStatusDTO, RegisterOrLoginIn, ResetPasswordIn, SessionDTO,
)
from .google_auth import IdentityVerificationError, IdentityVerifier, get_identity_verifier
from .jwt_auth import create_session_token
from .models import (
    Address, AdminProfile, AuthProvider, CodeAction, EmployeeProfile, EmployerProfile,
    User, UserRole,
)
from .permissions import PROFILE_RELATION
from .security import Authorized
from .validators import validate_email_format, validate_new_password

logger = logging.getLogger(__name__)

ALREADY_REGISTERED = "User already registered. Please login instead."
USER_NOT_REGISTERED = "User not found. Please register first."


def _user_queryset():
    return User.objects.select_related('address', 'employee_profile', 'employer_profile', 'admin_profile')


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
    return value or None


def issue_session(user: User, message: str, request: Optional[HttpRequest] = None) -> SessionDTO:
    """Refuse inactive accounts, then sign a session token."""
    if not user.is_active:
        raise Unauthorized(ResponseMessages.ACCOUNT_INACTIVE)

    token = create_session_token(user.id, user.email, user.role)
    user_logged_in.send(sender=user.__class__, request=request, user=user)
    return SessionDTO(token=token, user=_user_queryset().get(id=user.id), message=message)


def _create_address(user: User, payload, created_by: str) -> Address:
    return Address.objects.create(
        user=user,
        city=_blank_to_none(payload.city),
        state=_blank_to_none(payload.state),
        country=_blank_to_none(payload.country),
        pincode=_blank_to_none(payload.pincode),
        created_by=created_by,
    )


def _check_not_registered(email: str) -> None:
    if User.objects.filter(email=email).exists():
        raise Conflict(ALREADY_REGISTERED)


def _optional_password(payload) -> Optional[str]:
    if not payload.password:
        return None
    return validate_new_password(payload.password, payload.confirm_password)


# =============================================================================
# Google sign-in
# =============================================================================

def _google_sign_in(
    google_token: str,
    role: str,
    verifier: Optional[IdentityVerifier],
    request: Optional[HttpRequest],
) -> SessionDTO:
    verifier = verifier or get_identity_verifier()
    try:
        identity = verifier.verify_token(google_token)
    except IdentityVerificationError as e:
        raise BadRequest(str(e))

    user = User.objects.filter(email=identity.email).first()
    if user is None:
        with transaction.atomic():
            user = User.objects.create_user(
                email=identity.email,
                first_name=identity.first_name,
                last_name=identity.last_name,
                role=role,
                auth_provider=AuthProvider.GOOGLE,
                created_by=f"Self-{role}",
            )
            user.mark_email_verified()
            user.save(update_fields=['email_verified_at'])
            if role == UserRole.EMPLOYEE:
                EmployeeProfile.objects.create(user=user, created_by=user.created_by)
        logger.info(f"Created {role} account for {identity.email} from Google sign-in")

    return issue_session(user, "Logged in with Google successfully.", request)


# =============================================================================
# End-user registration or login
# =============================================================================

def register_or_login(
    payload: RegisterOrLoginIn,
    verifier: Optional[IdentityVerifier] = None,
    request: Optional[HttpRequest] = None,
) -> SessionDTO:
    if payload.google_token:
        return _google_sign_in(payload.google_token, UserRole.USER, verifier, request)

    if not payload.email or not payload.otp:
        raise ParameterMissing()
    email = validate_email_format(_normalize_email(payload.email), ResponseMessages.BAD_REQUEST)

    user = User.objects.filter(email=email).first()
    action = CodeAction.LOGIN if user else CodeAction.REGISTER
    otp_service.consume_code(email, action, payload.otp)

    if user is None:
        user = User.objects.create_user(
            email=email,
            role=UserRole.USER,
            auth_provider=AuthProvider.OTP,
            created_by="Self-User",
        )
        user.mark_email_verified()
        user.save(update_fields=['email_verified_at'])
        logger.info(f"Registered end user {email}")
        return issue_session(user, "Registered successfully.", request)

    return issue_session(user, "Logged in successfully.", request)


# =============================================================================
# Employee / employer registration
# =============================================================================

def register_employee(
    payload: EmployeeRegisterIn,
    resume_files: Iterable = (),
    work_sample_files: Iterable = (),
    request: Optional[HttpRequest] = None,
) -> SessionDTO:
    if not payload.email or not payload.first_name or not payload.last_name or not payload.otp:
        raise ParameterMissing()
    email = validate_email_format(_normalize_email(payload.email))
    password = _optional_password(payload)

    resume_files = list(resume_files or [])
    work_sample_files = list(work_sample_files or [])
    for file in resume_files:
        storage_service.validate_upload_file(file, UploadFolder.EMPLOYEE_RESUME)
    for file in work_sample_files:
        storage_service.validate_upload_file(file, UploadFolder.EMPLOYEE_WORK_SAMPLE)

    _check_not_registered(email)
    otp_service.consume_code(email, CodeAction.EMPLOYEE_REGISTER, payload.otp)

    resumes = storage_service.upload_files(resume_files, UploadFolder.EMPLOYEE_RESUME, email)
    samples = storage_service.upload_files(work_sample_files, UploadFolder.EMPLOYEE_WORK_SAMPLE, email)

    created_by = "Self-Employee"
    with transaction.atomic():
        user = User.objects.create_user(
            email=email,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            country_code=_blank_to_none(payload.country_code),
            mobile_number=_blank_to_none(payload.mobile_number),
            role=UserRole.EMPLOYEE,
            auth_provider=AuthProvider.OTP,
            created_by=created_by,
        )
        user.mark_email_verified()
        user.save(update_fields=['email_verified_at'])
        _create_address(user, payload, created_by)
        EmployeeProfile.objects.create(
            user=user,
            gender=_blank_to_none(payload.gender),
            industry=_blank_to_none(payload.industry),
            function_area=_blank_to_none(payload.function_area),
            current_ctc=payload.current_ctc,
            expected_ctc=payload.expected_ctc,
            resume_urls=resumes.public_urls,
            resume_preview_urls=resumes.preview_urls,
            work_sample_urls=samples.public_urls,
            work_sample_preview_urls=samples.preview_urls,
            tc_policy=payload.tc_policy,
            created_by=created_by,
        )
        if password:
            passwords.create_credential(user, password, created_by=created_by)

    logger.info(f"Registered employee {email}")
    return issue_session(user, f"{CodeAction.EMPLOYEE_REGISTER} successfully.", request)


def register_employer(payload: EmployerRegisterIn, request: Optional[HttpRequest] = None) -> SessionDTO:
    if (not payload.email or not payload.first_name or not payload.last_name
            or not payload.otp or not payload.company_name):
        raise ParameterMissing()
    email = validate_email_format(_normalize_email(payload.email))
    password = _optional_password(payload)

    _check_not_registered(email)
    otp_service.consume_code(email, CodeAction.EMPLOYER_REGISTER, payload.otp)

    created_by = "Self-Employer"
    with transaction.atomic():
        user = User.objects.create_user(
            email=email,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            country_code=_blank_to_none(payload.country_code),
            mobile_number=_blank_to_none(payload.mobile_number),
            role=UserRole.EMPLOYER,
            auth_provider=AuthProvider.OTP,
            created_by=created_by,
        )
        user.mark_email_verified()
        user.save(update_fields=['email_verified_at'])
        _create_address(user, payload, created_by)
        EmployerProfile.objects.create(
            user=user,
            company_name=payload.company_name.strip(),
            industry=_blank_to_none(payload.industry),
            function_area=_blank_to_none(payload.function_area),
            tc_policy=payload.tc_policy,
            created_by=created_by,
        )
        if password:
            passwords.create_credential(user, password, created_by=created_by)

    logger.info(f"Registered employer {email}")
    return issue_session(user, f"{CodeAction.EMPLOYER_REGISTER} successfully.", request)


# =============================================================================
# Login
# =============================================================================

def login(
    payload: LoginIn,
    verifier: Optional[IdentityVerifier] = None,
    request: Optional[HttpRequest] = None,
) -> SessionDTO:
    """
    Three ways in: a Google token; email + password + code; email + code.

    The password path still requires a LOGIN code as a second factor.
    """
    if payload.google_token:
        return _google_sign_in(payload.google_token, UserRole.EMPLOYEE, verifier, request)

    if payload.email and payload.password:
        email = _normalize_email(payload.email)
        user = User.objects.filter(email=email).first()
        if user is None:
            raise NotFound(USER_NOT_REGISTERED)

        credential = passwords.get_credential(user)
        if credential is None:
            raise BadRequest("Password not set. Please reset your password.")
        if not passwords.verify_password(credential, payload.password):
            raise Unauthorized("Invalid email or password.")
        if not payload.otp:
            raise ParameterMissing("Verification code is required.")

        otp_service.consume_code(email, CodeAction.LOGIN, payload.otp)
        return issue_session(user, "Login successful.", request)

    if payload.email and payload.otp:
        email = _normalize_email(payload.email)
        user = User.objects.filter(email=email).first()
        if user is None:
            raise NotFound(USER_NOT_REGISTERED)

        otp_service.consume_code(email, CodeAction.LOGIN, payload.otp)
        return issue_session(user, "Login with OTP successful.", request)

    raise ParameterMissing(
        "Provide valid credentials: either (email+password+otp), (email+otp), or (google_token)."
    )


# =============================================================================
# Passwords
# =============================================================================

def forgot_password(payload: ForgotPasswordIn) -> None:
    if not payload.email or not payload.password or not payload.confirm_password or not payload.otp:
        raise ParameterMissing()
    password = validate_new_password(payload.password, payload.confirm_password)

    email = _normalize_email(payload.email)
    user = User.objects.filter(email=email).first()
    if user is None:
        raise NotFound("User not found")

    passwords.ensure_not_reused(passwords.get_credential(user), password)
    otp_service.consume_code(email, CodeAction.FORGOT_PASSWORD, payload.otp)
    passwords.set_password(user, password, actor_label=user.display_label)
    logger.info(f"Password set through forgot-password for {email}")


def reset_password(payload: ResetPasswordIn, actor: Authorized) -> None:
    """Authenticated change. Users reset their own password; super admins may reset anyone's."""
    if not payload.password or not payload.confirm_password or not payload.otp:
        raise ParameterMissing()
    password = validate_new_password(payload.password, payload.confirm_password)

    user_id = payload.user_id or actor.user.id
    if user_id != actor.user.id and actor.role != UserRole.SUPER_ADMIN:
        raise Forbidden("You can only reset your own password.")

    user = User.objects.filter(id=user_id).first()
    if user is None:
        raise NotFound("User not found.")

    credential = passwords.get_credential(user)
    if credential is None:
        raise NotFound("Password record not found. Cannot reset password.")
    passwords.ensure_not_reused(credential, password)

    otp_service.consume_code(user.email, CodeAction.RESET_PASSWORD, payload.otp)
    passwords.rotate_password(credential, password, updated_by=actor.label)
    logger.info(f"Password reset for {user.email} by {actor.label}")


# =============================================================================
# Super admin
# =============================================================================

def onboard_user(payload: OnboardUserIn, actor: Authorized) -> User:
    """Create an account of any role on someone's behalf, verified by an ONBOARDING code."""
    if not payload.email or not payload.first_name or not payload.last_name or not payload.otp or not payload.role:
        raise ParameterMissing("Email, name, otp and role are required.")
    if payload.role not in UserRole.values:
        raise BadRequest("Invalid role selected")
    if payload.experience is not None and payload.experience < 0:
        raise BadRequest("experience cannot be negative")
    email = validate_email_format(_normalize_email(payload.email))
    password = _optional_password(payload)

    _check_not_registered(email)
    otp_service.consume_code(email, CodeAction.ONBOARDING, payload.otp)

    created_by = actor.label
    with transaction.atomic():
        user = User.objects.create_user(
            email=email,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            role=payload.role,
            country_code=_blank_to_none(payload.country_code),
            mobile_number=_blank_to_none(payload.mobile_number),
            alternative_mobile_number=_blank_to_none(payload.alternative_mobile_number),
            auth_provider=AuthProvider.ADMIN_CREATED,
            created_by=created_by,
        )
        user.mark_email_verified()
        user.save(update_fields=['email_verified_at'])
        _create_address(user, payload, created_by)

        relation = PROFILE_RELATION.get(payload.role)
        if relation == 'employee_profile':
            EmployeeProfile.objects.create(
                user=user,
                industry=_blank_to_none(payload.industry),
                function_area=_blank_to_none(payload.function_area),
                skills=payload.skills,
                experience=payload.experience,
                linkedin_url=_blank_to_none(payload.linkedin_url),
                tc_policy=payload.tc_policy,
                created_by=created_by,
            )
        elif relation == 'employer_profile':
            EmployerProfile.objects.create(
                user=user,
                company_name=_blank_to_none(payload.company_name),
                industry=_blank_to_none(payload.industry),
                function_area=_blank_to_none(payload.function_area),
                linkedin_url=_blank_to_none(payload.linkedin_url),
                tc_policy=payload.tc_policy,
                created_by=created_by,
            )
        elif relation == 'admin_profile':
            AdminProfile.objects.create(
                user=user,
                linkedin_url=_blank_to_none(payload.linkedin_url),
                tc_policy=payload.tc_policy,
                created_by=created_by,
            )

        if password:
            passwords.create_credential(user, password, created_by=created_by)

    logger.info(f"{actor.label} onboarded {payload.role} {email}")
    return _user_queryset().get(id=user.id)


def list_users(
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    industry: Optional[str] = None,
    function_area: Optional[str] = None,
    experience: Optional[int] = None,
    mobile_number: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[int, List[User]]:
    """
    Filtered, paginated user directory, newest first.

    Returns:
        (total_count, users on the requested page)
    """
    queryset = _user_queryset()

    if role:
        queryset = queryset.filter(role=role)
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if mobile_number:
        queryset = queryset.filter(mobile_number=mobile_number)
    if industry:
        queryset = queryset.filter(
            Q(employee_profile__industry__iexact=industry) |
            Q(employer_profile__industry__iexact=industry)
        )
    if function_area:
        queryset = queryset.filter(
            Q(employee_profile__function_area__iexact=function_area) |
            Q(employer_profile__function_area__iexact=function_area)
        )
    if experience is not None:
        queryset = queryset.filter(employee_profile__experience=experience)
    if search:
        queryset = queryset.filter(
            Q(email__icontains=search) |
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(mobile_number__icontains=search)
        )

    page = max(page, 1)
    limit = max(min(limit, 100), 1)
    total = queryset.count()
    offset = (page - 1) * limit
    return total, list(queryset.order_by('-date_joined')[offset:offset + limit])


def set_user_status(user_id: UUID, is_active: bool, actor: Authorized) -> User:
    user = _user_queryset().filter(id=user_id).first()
    if user is None:
        raise NotFound("User not found.")
    if user.id == actor.user.id and not is_active:
        raise BadRequest("You cannot deactivate your own account.")

    user.is_active = is_active
    user.save(update_fields=['is_active', 'updated_at'])
    logger.info(f"{actor.label} set {user.email} active={is_active}")
    return user


def get_user_profile(user_id: UUID) -> User:
    user = _user_queryset().filter(id=user_id).first()
    if user is None:
        raise NotFound("User not found.")
    return user


# Role-specific fields that must be filled for a complete profile.
REQUIRED_PROFILE_FIELDS = {
    UserRole.EMPLOYEE: ['industry', 'function_area', 'skills', 'experience', 'tc_policy'],
    UserRole.EMPLOYER: ['company_name', 'industry', 'function_area', 'tc_policy'],
    UserRole.ADMIN: ['linkedin_url', 'tc_policy'],
    UserRole.SUPER_ADMIN: ['linkedin_url', 'tc_policy'],
}


def get_profile_status(user_id: UUID) -> ProfileStatusDTO:
    """Report which common, address and role fields are still empty."""
    user = get_user_profile(user_id)
    missing = []

    for field in ('email', 'first_name', 'last_name', 'mobile_number'):
        if not getattr(user, field):
            missing.append(field)

    address = getattr(user, 'address', None)
    if address is None:
        missing.append('address')
    else:
        for field in ('city', 'state', 'country', 'pincode'):
            if not getattr(address, field):
                missing.append(field)

    required = REQUIRED_PROFILE_FIELDS.get(user.role, [])
    profile = getattr(user, PROFILE_RELATION[user.role], None) if required else None
    for field in required:
        # experience == 0 is a filled-in value
        value = getattr(profile, field, None) if profile else None
        if value is None or value == "" or value is False or value == []:
            missing.append(field)

    return ProfileStatusDTO(user=user, profile_completed=not missing, missing_fields=missing)
