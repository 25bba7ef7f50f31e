"""
Job posting services.

Employers manage only the jobs they posted; super admins manage any job.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from django.db import transaction
from django.db.models import Q

from apps.categories.models import Category
from apps.core import storage_service
from apps.core.errors import BadRequest, Forbidden, NotFound, ParameterMissing
from apps.core.storage_service import UploadFolder
from apps.identity.models import UserRole
from apps.identity.security import Authorized
from apps.identity.validators import validate_email_format

from .dtos import JobIn, JobLocationIn, JobUpdateIn
from .models import EmploymentType, Job, JobLocation, JobMode, SalaryType

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class ResultPage:
    """One page of a listing; `page` and `limit` are the values actually applied."""
    total: int
    page: int
    limit: int
    items: list


def paginate(queryset, page: int, limit: int) -> ResultPage:
    page = max(page, 1)
    limit = max(min(limit, MAX_PAGE_SIZE), 1)
    offset = (page - 1) * limit
    return ResultPage(queryset.count(), page, limit, list(queryset[offset:offset + limit]))


def _job_queryset():
    return Job.objects.select_related('category', 'posted_by').prefetch_related('locations')


def get_job(job_id: UUID) -> Job:
    job = _job_queryset().filter(id=job_id).first()
    if job is None:
        raise NotFound("Job not found.")
    return job


def _ensure_can_manage(job: Job, actor: Authorized) -> None:
    if actor.role != UserRole.SUPER_ADMIN and job.posted_by_id != actor.user.id:
        raise Forbidden("You can only manage jobs you posted.")


def _check_choice(value: Optional[str], choices, field: str) -> None:
    if value is not None and value not in choices.values:
        raise BadRequest(f"Invalid {field}: {value}")


def _check_range(low: Optional[int], high: Optional[int], field: str) -> None:
    if low is not None and low < 0:
        raise BadRequest(f"min_{field} cannot be negative")
    if high is not None and high < 0:
        raise BadRequest(f"max_{field} cannot be negative")
    if low is not None and high is not None and high < low:
        raise BadRequest(f"max_{field} must be greater than or equal to min_{field}")


def _resolve_category(category_id: Optional[UUID]) -> Optional[Category]:
    if category_id is None:
        return None
    category = Category.objects.filter(id=category_id).first()
    if category is None:
        raise NotFound("Category not found.")
    return category


def _validate_fields(
    mode: Optional[str],
    employment_type: Optional[str],
    salary_type: Optional[str],
    experience: Tuple[Optional[int], Optional[int]],
    salary: Tuple[Optional[int], Optional[int]],
    openings: Optional[int],
) -> None:
    _check_choice(mode, JobMode, 'mode')
    _check_choice(employment_type, EmploymentType, 'employment_type')
    _check_choice(salary_type, SalaryType, 'salary_type')
    _check_range(*experience, field='experience')
    _check_range(*salary, field='salary')
    if openings is not None and openings < 1:
        raise BadRequest("openings must be at least 1")


def _create_locations(job: Job, locations: List[JobLocationIn]) -> None:
    JobLocation.objects.bulk_create([
        JobLocation(
            job=job,
            city=location.city.strip(),
            state=location.state.strip(),
            country=location.country.strip(),
            pincode=location.pincode.strip(),
            landmark=location.landmark.strip(),
        )
        for location in locations
    ])


def post_job(payload: JobIn, actor: Authorized) -> Job:
    if not payload.title or not payload.description or not payload.company_name or not payload.company_email:
        raise ParameterMissing()
    if not payload.locations:
        raise ParameterMissing("At least one location is required.")
    company_email = validate_email_format(payload.company_email)
    _validate_fields(
        payload.mode,
        payload.employment_type,
        payload.salary_type,
        (payload.min_experience, payload.max_experience),
        (payload.min_salary, payload.max_salary),
        payload.openings,
    )
    category = _resolve_category(payload.category_id)

    with transaction.atomic():
        job = Job.objects.create(
            title=payload.title.strip(),
            description=payload.description.strip(),
            requirements=payload.requirements,
            responsibilities=payload.responsibilities,
            education=payload.education,
            min_experience=payload.min_experience,
            max_experience=payload.max_experience,
            salary_type=payload.salary_type,
            min_salary=payload.min_salary,
            max_salary=payload.max_salary,
            mode=payload.mode or JobMode.ON_SITE,
            employment_type=payload.employment_type or EmploymentType.FULL_TIME,
            skills_required=payload.skills_required,
            openings=payload.openings,
            deadline=payload.deadline,
            company_name=payload.company_name.strip(),
            company_email=company_email,
            category=category,
            posted_by=actor.user,
            created_by=actor.label,
        )
        _create_locations(job, payload.locations)

    logger.info(f"Job {job.id} posted by {actor.label}")
    return get_job(job.id)


UPDATABLE_FIELDS = [
    'title', 'description', 'requirements', 'responsibilities', 'education',
    'min_experience', 'max_experience', 'salary_type', 'min_salary', 'max_salary',
    'mode', 'employment_type', 'skills_required', 'openings', 'deadline',
    'company_name', 'is_active',
]

# An explicit null clears these; for every other field null means "unchanged".
NULLABLE_FIELDS = {
    'min_experience', 'max_experience', 'salary_type', 'min_salary', 'max_salary', 'deadline', 'category_id',
}


def _is_change(changes: dict, field: str) -> bool:
    return field in changes and (changes[field] is not None or field in NULLABLE_FIELDS)


def update_job(job_id: UUID, payload: JobUpdateIn, actor: Authorized) -> Job:
    """
    Apply the sent fields to the job.

    Sending null for an optional column (experience, salary, deadline,
    category) clears it.
    """
    job = get_job(job_id)
    _ensure_can_manage(job, actor)

    changes = payload.dict(exclude_unset=True)
    if 'title' in changes:
        if not (changes['title'] or '').strip():
            raise ParameterMissing("Title cannot be empty.")
        changes['title'] = changes['title'].strip()
    if 'company_email' in changes:
        changes['company_email'] = validate_email_format(changes['company_email'])
    if 'locations' in changes and not payload.locations:
        raise ParameterMissing("At least one location is required.")

    # Ranges are checked against the merged values, not just the sent ones.
    merged = {
        field: changes[field] if _is_change(changes, field) else getattr(job, field)
        for field in UPDATABLE_FIELDS
    }
    _validate_fields(
        merged['mode'],
        merged['employment_type'],
        merged['salary_type'],
        (merged['min_experience'], merged['max_experience']),
        (merged['min_salary'], merged['max_salary']),
        merged['openings'],
    )
    category = _resolve_category(changes['category_id']) if 'category_id' in changes else job.category

    with transaction.atomic():
        for field in UPDATABLE_FIELDS:
            if _is_change(changes, field):
                setattr(job, field, changes[field])
        if 'company_email' in changes:
            job.company_email = changes['company_email']
        job.category = category
        job.updated_by = actor.label
        job.save()

        if payload.locations:
            job.locations.all().delete()
            _create_locations(job, payload.locations)

    logger.info(f"Job {job.id} updated by {actor.label}")
    return get_job(job.id)


def replace_job_logo(job_id: UUID, logo_files: Iterable, actor: Authorized) -> Job:
    job = get_job(job_id)
    _ensure_can_manage(job, actor)
    logo_files = list(logo_files or [])
    if not logo_files:
        raise ParameterMissing("Logo file is required.")

    job.logo_url, job.logo_preview_url = storage_service.replace_file(
        job.logo_url, logo_files, UploadFolder.JOB_POST_LOGO, f"{job.posted_by.email}_{job.id}",
    )
    job.updated_by = actor.label
    job.save(update_fields=['logo_url', 'logo_preview_url', 'updated_by', 'updated_at'])
    return job


def delete_job(job_id: UUID, actor: Authorized) -> None:
    """Remove the job, its locations and its stored logo."""
    job = get_job(job_id)
    _ensure_can_manage(job, actor)
    logo_url = job.logo_url

    with transaction.atomic():
        job.locations.all().delete()
        job.delete()

    storage_service.delete_file(logo_url)
    logger.info(f"Job {job_id} deleted by {actor.label}")


def list_jobs(
    search: Optional[str] = None,
    mode: Optional[str] = None,
    employment_type: Optional[str] = None,
    posted_by: Optional[UUID] = None,
    category_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    country: Optional[str] = None,
    pincode: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> ResultPage:
    """
    Filtered, paginated job listing, newest first.

    Location filters match within a single location of the job.
    """
    queryset = _job_queryset()

    if search:
        queryset = queryset.filter(Q(title__icontains=search) | Q(description__icontains=search))
    if mode:
        queryset = queryset.filter(mode=mode)
    if employment_type:
        queryset = queryset.filter(employment_type=employment_type)
    if posted_by:
        queryset = queryset.filter(posted_by_id=posted_by)
    if category_id:
        queryset = queryset.filter(category_id=category_id)
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)

    location_filters = {
        f'locations__{field}__icontains': value
        for field, value in [('city', city), ('state', state), ('country', country), ('pincode', pincode)]
        if value
    }
    if location_filters:
        queryset = queryset.filter(**location_filters).distinct()

    return paginate(queryset.order_by('-created_at'), page, limit)
