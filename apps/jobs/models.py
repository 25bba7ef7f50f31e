import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class JobMode(models.TextChoices):
    HYBRID = 'HYBRID', 'Hybrid'
    ON_SITE = 'ON_SITE', 'On Site'
    REMOTE = 'REMOTE', 'Remote'


class EmploymentType(models.TextChoices):
    FULL_TIME = 'FULL_TIME', 'Full Time'
    PART_TIME = 'PART_TIME', 'Part Time'
    CONTRACT = 'CONTRACT', 'Contract'
    INTERNSHIP = 'INTERNSHIP', 'Internship'
    FREELANCE = 'FREELANCE', 'Freelance'


class SalaryType(models.TextChoices):
    YEARLY = 'YEARLY', 'Yearly'
    MONTHLY = 'MONTHLY', 'Monthly'


class Job(models.Model):
    """
    A job posting owned by the employer (or super admin) who posted it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField()
    requirements = models.TextField(blank=True, default="")
    responsibilities = models.TextField(blank=True, default="")
    education = models.CharField(max_length=255, blank=True, default="")

    min_experience = models.PositiveIntegerField(null=True, blank=True)
    max_experience = models.PositiveIntegerField(null=True, blank=True)
    salary_type = models.CharField(max_length=10, choices=SalaryType.choices, null=True, blank=True)
    min_salary = models.PositiveIntegerField(null=True, blank=True)
    max_salary = models.PositiveIntegerField(null=True, blank=True)

    mode = models.CharField(max_length=10, choices=JobMode.choices, default=JobMode.ON_SITE)
    employment_type = models.CharField(
        max_length=20,
        choices=EmploymentType.choices,
        default=EmploymentType.FULL_TIME,
    )
    skills_required = models.JSONField(default=list, blank=True)
    openings = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    deadline = models.DateField(null=True, blank=True)

    company_name = models.CharField(max_length=255)
    company_email = models.EmailField()
    category = models.ForeignKey(
        'categories.Category',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='jobs',
    )

    logo_url = models.URLField(max_length=500, blank=True, null=True)
    logo_preview_url = models.URLField(max_length=500, blank=True, null=True)

    is_active = models.BooleanField(default=True)
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='jobs_posted',
    )
    created_by = models.CharField(max_length=255, blank=True, default="")
    updated_by = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'mode', 'employment_type'], name='job_listing_idx'),
        ]

    def __str__(self):
        return f"{self.title} @ {self.company_name}"


class JobLocation(models.Model):
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='locations')
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    country = models.CharField(max_length=100, blank=True, default="")
    pincode = models.CharField(max_length=20, blank=True, default="")
    landmark = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return ", ".join(part for part in [self.city, self.state, self.country] if part)


class ApplicationStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPLIED = 'APPLIED', 'Applied'
    WITHDRAW = 'WITHDRAW', 'Withdrawn'
    RE_APPLIED = 'RE_APPLIED', 'Re-applied'
    REJECTED = 'REJECTED', 'Rejected'
    RESUME_VIEWED = 'RESUME_VIEWED', 'Resume viewed'
    WAITING_EMPLOYER_ACTION = 'WAITING_EMPLOYER_ACTION', 'Waiting for employer action'
    APPLICATION_SEND = 'APPLICATION_SEND', 'Application sent'
    CONTACT_VIEW = 'CONTACT_VIEW', 'Contact viewed'
    SELECTED = 'SELECTED', 'Selected'
    SHORTLISTED = 'SHORTLISTED', 'Shortlisted'
    INTERVIEW_SCHEDULED = 'INTERVIEW_SCHEDULED', 'Interview scheduled'
    INTERVIEW_COMPLETED = 'INTERVIEW_COMPLETED', 'Interview completed'
    OFFERED = 'OFFERED', 'Offered'
    HIRED = 'HIRED', 'Hired'


# Set only by the applicant's own apply and withdraw actions.
APPLICANT_STATUSES = {ApplicationStatus.APPLIED, ApplicationStatus.RE_APPLIED, ApplicationStatus.WITHDRAW}


class JobApplication(models.Model):
    """
    An employee's application to a job.

    There is at most one row per job and employee: withdrawing deactivates
    it and applying again reactivates it as RE_APPLIED.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='applications')
    employee = models.ForeignKey(
        'identity.EmployeeProfile',
        on_delete=models.CASCADE,
        related_name='applications',
    )
    status = models.CharField(max_length=30, choices=ApplicationStatus.choices, default=ApplicationStatus.APPLIED)
    status_reason = models.TextField(blank=True, default="")
    how_fit_role = models.TextField(blank=True, default="")

    resume_urls = models.JSONField(default=list, blank=True)
    resume_preview_urls = models.JSONField(default=list, blank=True)
    work_sample_urls = models.JSONField(default=list, blank=True)
    work_sample_preview_urls = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)
    applied_by = models.CharField(max_length=255, blank=True, default="")
    withdrawn_by = models.CharField(max_length=255, blank=True, default="")
    updated_by = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['job', 'employee'], name='unique_job_application'),
        ]
        indexes = [
            models.Index(fields=['is_active', 'status'], name='application_status_idx'),
        ]

    def __str__(self):
        return f"{self.employee.user} -> {self.job.title} ({self.status})"
