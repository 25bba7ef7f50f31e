"""
Job application services.

Employees apply to active jobs and may withdraw their own applications.
Employers move applications for their jobs through the hiring statuses;
super admins can act on any application.
"""
import logging
from datetime import date
from typing import Iterable, Optional, Tuple
from uuid import UUID

from django.db import transaction
from django.db.models import Q

from apps.core import storage_service
from apps.core.errors import BadRequest, Conflict, Forbidden, NotFound, ParameterMissing
from apps.core.storage_service import StoredFiles, UploadFolder
from apps.identity.models import EmployeeProfile, UserRole
from apps.identity.security import Authorized

from .models import APPLICANT_STATUSES, ApplicationStatus, Job, JobApplication
from .services import ResultPage, paginate

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {'created_at', 'updated_at', 'status'}


def _application_queryset():
    return JobApplication.objects.select_related('job', 'employee__user').prefetch_related('job__locations')


def get_application(application_id: UUID) -> JobApplication:
    application = _application_queryset().filter(id=application_id).first()
    if application is None:
        raise NotFound("Job application not found")
    return application


def _latest(urls: list) -> list:
    return urls[-1:]


def _choose_files(
    uploaded: StoredFiles, kept_urls: list, kept_previews: list,
) -> Tuple[list, list]:
    """Use the new upload when there is one, otherwise the profile's latest file."""
    if uploaded.public_urls:
        return uploaded.public_urls, uploaded.preview_urls
    return _latest(kept_urls), _latest(kept_previews)


def apply_for_job(
    job_id: Optional[UUID],
    how_fit_role: Optional[str],
    actor: Authorized,
    resume_files: Iterable = (),
    work_sample_files: Iterable = (),
) -> Tuple[JobApplication, str]:
    """
    Apply to an active job, or reapply after a withdrawal.

    A resume is required: either uploaded with the application or the last
    one stored on the employee's profile. New uploads are also appended to
    the profile. Work samples are optional and fall back the same way.
    """
    if not job_id:
        raise ParameterMissing("Job ID is required")

    profile = EmployeeProfile.objects.select_related('user').filter(user=actor.user).first()
    if profile is None:
        raise NotFound("Employee record not found.")

    job = Job.objects.filter(id=job_id, is_active=True).first()
    if job is None:
        raise NotFound("Job not found or inactive.")

    existing = JobApplication.objects.filter(job=job, employee=profile).first()
    if existing is not None and existing.is_active:
        raise Conflict("You have already applied for this job.")

    resume_files = list(resume_files or [])
    work_sample_files = list(work_sample_files or [])
    if not resume_files and not profile.resume_urls:
        raise ParameterMissing("Resume is required to apply for this job.")
    for file in resume_files:
        storage_service.validate_upload_file(file, UploadFolder.EMPLOYEE_RESUME)
    for file in work_sample_files:
        storage_service.validate_upload_file(file, UploadFolder.EMPLOYEE_WORK_SAMPLE)

    file_name = f"{profile.user.email}_{job.id}"
    resumes = storage_service.upload_files(resume_files, UploadFolder.EMPLOYEE_RESUME, file_name)
    samples = storage_service.upload_files(work_sample_files, UploadFolder.EMPLOYEE_WORK_SAMPLE, file_name)
    resume_urls, resume_previews = _choose_files(resumes, profile.resume_urls, profile.resume_preview_urls)
    sample_urls, sample_previews = _choose_files(
        samples, profile.work_sample_urls, profile.work_sample_preview_urls,
    )

    with transaction.atomic():
        if resumes.public_urls or samples.public_urls:
            profile.resume_urls = profile.resume_urls + resumes.public_urls
            profile.resume_preview_urls = profile.resume_preview_urls + resumes.preview_urls
            profile.work_sample_urls = profile.work_sample_urls + samples.public_urls
            profile.work_sample_preview_urls = profile.work_sample_preview_urls + samples.preview_urls
            profile.save(update_fields=[
                'resume_urls', 'resume_preview_urls', 'work_sample_urls', 'work_sample_preview_urls', 'updated_at',
            ])

        application = existing or JobApplication(job=job, employee=profile)
        if existing is not None:
            application.status = ApplicationStatus.RE_APPLIED
            application.status_reason = "Re-Applied application successfully after withdrawal"
            application.withdrawn_by = ""
            message = "Job application Re-Applied successfully!"
        else:
            application.status = ApplicationStatus.APPLIED
            application.status_reason = "Applied the application successfully"
            message = "Job application submitted successfully!"
        application.is_active = True
        application.how_fit_role = (how_fit_role or "").strip()
        application.applied_by = actor.label
        application.resume_urls = resume_urls
        application.resume_preview_urls = resume_previews
        application.work_sample_urls = sample_urls
        application.work_sample_preview_urls = sample_previews
        application.save()

    logger.info(f"Application {application.id} to job {job.id} ({application.status}) by {actor.label}")
    return get_application(application.id), message


def withdraw_application(application_id: UUID, reason: Optional[str], actor: Authorized) -> JobApplication:
    """Only the applicant can withdraw, and only while the job is still active."""
    if not (reason or "").strip():
        raise ParameterMissing("A reason is required to withdraw an application.")

    application = _application_queryset().filter(id=application_id).first()
    if application is None or not application.is_active:
        raise NotFound("Job application not found or already withdrawn")
    if application.employee.user_id != actor.user.id:
        raise Forbidden("You are not authorized to withdraw this application")
    if not application.job.is_active:
        raise BadRequest("Cannot withdraw application because the job is no longer active")

    application.is_active = False
    application.status = ApplicationStatus.WITHDRAW
    application.status_reason = reason.strip()
    application.withdrawn_by = actor.label
    application.save(update_fields=['is_active', 'status', 'status_reason', 'withdrawn_by', 'updated_at'])

    logger.info(f"Application {application.id} withdrawn by {actor.label}")
    return application


def _ensure_can_review(application: JobApplication, actor: Authorized) -> None:
    if actor.role != UserRole.SUPER_ADMIN and application.job.posted_by_id != actor.user.id:
        raise Forbidden("You can only manage applications for jobs you posted.")


def update_application_status(
    application_id: UUID, status: Optional[str], reason: Optional[str], actor: Authorized,
) -> JobApplication:
    if not status:
        raise ParameterMissing("Application status is required.")
    if status not in ApplicationStatus.values or status in APPLICANT_STATUSES:
        raise BadRequest(f"Invalid status: {status}")

    application = get_application(application_id)
    _ensure_can_review(application, actor)
    if not application.is_active:
        raise Conflict("Cannot update status of inactive or withdrawn application")

    application.status = status
    application.status_reason = (reason or "").strip()
    application.updated_by = actor.label
    application.save(update_fields=['status', 'status_reason', 'updated_by', 'updated_at'])

    logger.info(f"Application {application.id} moved to {status} by {actor.label}")
    return application


def list_applications(
    actor: Authorized,
    active_only: bool = True,
    job_id: Optional[UUID] = None,
    employee_id: Optional[UUID] = None,
    status: Optional[str] = None,
    is_active: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    sort_by: str = 'created_at',
    order: str = 'desc',
    page: int = 1,
    limit: int = 20,
) -> ResultPage:
    """
    Filtered, paginated applications.

    Employers see the active applications to their own jobs. With
    `active_only` off (super admin listing) every application is included
    and `is_active` can be used as a filter instead.
    """
    if status and status not in ApplicationStatus.values:
        raise BadRequest(f"Invalid status. Must be one of: {', '.join(ApplicationStatus.values)}")
    if sort_by not in SORTABLE_FIELDS:
        raise BadRequest(f"Cannot sort by {sort_by}")
    if order not in ('asc', 'desc'):
        raise BadRequest("order must be asc or desc")

    queryset = _application_queryset()
    if active_only:
        queryset = queryset.filter(is_active=True)
    elif is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if actor.role != UserRole.SUPER_ADMIN:
        queryset = queryset.filter(job__posted_by=actor.user)

    if job_id:
        queryset = queryset.filter(job_id=job_id)
    if employee_id:
        queryset = queryset.filter(employee_id=employee_id)
    if status:
        queryset = queryset.filter(status=status)
    if start_date:
        queryset = queryset.filter(created_at__date__gte=start_date)
    if end_date:
        queryset = queryset.filter(created_at__date__lte=end_date)
    if search:
        queryset = queryset.filter(
            Q(employee__user__first_name__icontains=search)
            | Q(employee__user__last_name__icontains=search)
            | Q(job__title__icontains=search)
        )

    ordering = sort_by if order == 'asc' else f'-{sort_by}'
    return paginate(queryset.order_by(ordering, 'id'), page, limit)
