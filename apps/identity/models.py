import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser, UserManager
from django.utils import timezone


class UserRole(models.TextChoices):
    USER = 'USER', 'End User'
    EMPLOYEE = 'EMPLOYEE', 'Employee'
    EMPLOYER = 'EMPLOYER', 'Employer'
    ADMIN = 'ADMIN', 'Administrator'
    SUPER_ADMIN = 'SUPER_ADMIN', 'Super Administrator'
    OPERATOR = 'OPERATOR', 'Operator'


class AuthProvider(models.TextChoices):
    OTP = 'OTP', 'One-time code'
    GOOGLE = 'GOOGLE', 'Google'
    ADMIN_CREATED = 'ADMIN_CREATED', 'Created by administrator'


class CodeAction(models.TextChoices):
    LOGIN = 'LOGIN', 'Login'
    REGISTER = 'REGISTER', 'Register'
    REGISTER_OR_LOGIN = 'REGISTER-OR-LOGIN', 'Register or login'
    EMPLOYEE_REGISTER = 'EMPLOYEE-REGISTER', 'Employee registration'
    EMPLOYER_REGISTER = 'EMPLOYER-REGISTER', 'Employer registration'
    RESET_PASSWORD = 'RESET-PASSWORD', 'Reset password'
    FORGOT_PASSWORD = 'FORGOT-PASSWORD', 'Forgot password'
    ONBOARDING = 'ONBOARDING', 'Onboarding'


class Gender(models.TextChoices):
    MALE = 'MALE', 'Male'
    FEMALE = 'FEMALE', 'Female'
    OTHER = 'OTHER', 'Other'


class PortalUserManager(UserManager):
    """Email is the login name; username mirrors it."""

    def create_user(self, username=None, email=None, password=None, **extra_fields):
        email = self.normalize_email(email or username)
        return super().create_user(username or email, email, password, **extra_fields)

    def create_superuser(self, username=None, email=None, password=None, **extra_fields):
        email = self.normalize_email(email or username)
        extra_fields.setdefault('role', UserRole.SUPER_ADMIN)
        extra_fields.setdefault('auth_provider', AuthProvider.ADMIN_CREATED)
        return super().create_superuser(username or email, email, password, **extra_fields)


class User(AbstractUser):
    """
    Portal account. Never hard-deleted; administrators toggle is_active.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.USER
    )
    auth_provider = models.CharField(
        max_length=20,
        choices=AuthProvider.choices,
        default=AuthProvider.OTP
    )
    country_code = models.CharField(max_length=8, blank=True, null=True)
    mobile_number = models.CharField(max_length=20, blank=True, null=True)
    alternative_mobile_number = models.CharField(max_length=20, blank=True, null=True)
    email_verified_at = models.DateTimeField(null=True, blank=True)

    # Label of whoever created the account, e.g. "Self-Employee" or "Jane Doe - SUPER_ADMIN"
    created_by = models.CharField(max_length=255, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PortalUserManager()

    class Meta:
        ordering = ['-date_joined']

    def __str__(self):
        return self.email or self.username

    @property
    def display_label(self) -> str:
        name = self.get_full_name() or self.email
        return f"{name} - {self.role}"

    def mark_email_verified(self):
        self.email_verified_at = timezone.now()


class Address(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='address')
    city = models.CharField(max_length=100, blank=True, null=True)
    state = models.CharField(max_length=100, blank=True, null=True)
    country = models.CharField(max_length=100, blank=True, null=True)
    pincode = models.CharField(max_length=20, blank=True, null=True)
    created_by = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Addresses"

    def __str__(self):
        return ", ".join(part for part in [self.city, self.state, self.country] if part) or "No address"


class EmployeeProfile(models.Model):
    """Job seeker details, including uploaded resumes and work samples."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='employee_profile')
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True, null=True)
    industry = models.CharField(max_length=150, blank=True, null=True)
    function_area = models.CharField(max_length=150, blank=True, null=True)
    experience = models.PositiveIntegerField(null=True, blank=True)
    skills = models.JSONField(default=list, blank=True)
    current_ctc = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    expected_ctc = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    linkedin_url = models.URLField(blank=True, null=True)
    resume_urls = models.JSONField(default=list, blank=True)
    resume_preview_urls = models.JSONField(default=list, blank=True)
    work_sample_urls = models.JSONField(default=list, blank=True)
    work_sample_preview_urls = models.JSONField(default=list, blank=True)
    tc_policy = models.BooleanField(default=False)
    created_by = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Employee profile of {self.user}"


class EmployerProfile(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='employer_profile')
    company_name = models.CharField(max_length=255, blank=True, null=True)
    industry = models.CharField(max_length=150, blank=True, null=True)
    function_area = models.CharField(max_length=150, blank=True, null=True)
    linkedin_url = models.URLField(blank=True, null=True)
    tc_policy = models.BooleanField(default=False)
    created_by = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.company_name or 'Employer'} ({self.user})"


class AdminProfile(models.Model):
    """Shared by ADMIN, SUPER_ADMIN and OPERATOR accounts."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='admin_profile')
    linkedin_url = models.URLField(blank=True, null=True)
    tc_policy = models.BooleanField(default=False)
    created_by = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Admin profile of {self.user}"


class OneTimeCode(models.Model):
    """
    Emailed verification code. The unique constraint on `code` lets
    concurrent issuers detect collisions at insert time.
    """
    email = models.EmailField(db_index=True)
    code = models.CharField(max_length=12, unique=True)
    action = models.CharField(max_length=30, choices=CodeAction.choices)
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['email', 'action'], name='otp_email_action_idx'),
        ]

    def __str__(self):
        return f"{self.action} code for {self.email}"

    @property
    def is_expired(self) -> bool:
        return self.expires_at < timezone.now()


class Credential(models.Model):
    """Current password hash plus the most recent previous hashes, newest first."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='credential')
    password_hash = models.CharField(max_length=255)
    previous_hashes = models.JSONField(default=list, blank=True)
    created_by = models.CharField(max_length=255, blank=True)
    updated_by = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Credential for {self.user}"
