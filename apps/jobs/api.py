"""
Job posting API endpoints.

Listing and detail are public. Posting, editing and deleting need an
EMPLOYER or SUPER_ADMIN session token; employers only touch their own jobs.
Employees apply to jobs under /applications.
"""
import math
from datetime import date
from typing import Optional
from uuid import UUID
from ninja import Form, Router
from django.http import HttpRequest

from apps.core.responses import action_complete
from apps.identity.permissions import RoleGroups
from apps.identity.security import SessionTokenAuth

from .dtos import (
    ApplicationStatusIn, ApplyIn, JobIn, JobUpdateIn, WithdrawApplicationIn, application_payload, job_payload,
)
from . import application_service, services

router = Router(tags=["Job"])

employer_auth = SessionTokenAuth(RoleGroups.EMPLOYER)
employee_auth = SessionTokenAuth(RoleGroups.EMPLOYEE)


@router.post("/", auth=employer_auth)
def post_job(request: HttpRequest, payload: JobIn):
    job = services.post_job(payload, request.auth)
    return action_complete("Job posted successfully!", {"job": job_payload(job)})


@router.get("/", auth=None)
def list_jobs(
    request: HttpRequest,
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
):
    """
    Query Parameters:
    - search: matches title or description
    - mode, employment_type, posted_by, category_id, is_active: exact filters
    - city, state, country, pincode: partial match on one of the job's locations
    - page, limit: pagination (limit capped at 100)
    """
    result = services.list_jobs(
        search=search,
        mode=mode,
        employment_type=employment_type,
        posted_by=posted_by,
        category_id=category_id,
        is_active=is_active,
        city=city,
        state=state,
        country=country,
        pincode=pincode,
        page=page,
        limit=limit,
    )
    return action_complete("Jobs fetched successfully", {
        "page": result.page,
        "limit": result.limit,
        "total": result.total,
        "jobs": [job_payload(job) for job in result.items],
    })


# =============================================================================
# Applications
# =============================================================================

@router.post("/applications", auth=employee_auth)
def apply_for_job(request: HttpRequest, payload: ApplyIn = Form(...)):
    """
    Apply to an active job (multipart).

    Optional files: `resume_files` and `work_sample_files`. Without a new
    resume the latest one on the employee's profile is used.
    """
    application, message = application_service.apply_for_job(
        payload.job_id,
        payload.how_fit_role,
        request.auth,
        resume_files=request.FILES.getlist('resume_files'),
        work_sample_files=request.FILES.getlist('work_sample_files'),
    )
    return action_complete(message, {"application": application_payload(application)})


@router.post("/applications/{application_id}/withdraw", auth=employee_auth)
def withdraw_application(request: HttpRequest, application_id: UUID, payload: WithdrawApplicationIn):
    application = application_service.withdraw_application(application_id, payload.reason, request.auth)
    return action_complete(
        "Job application withdrawn successfully", {"application": application_payload(application)},
    )


@router.patch("/applications/{application_id}/status", auth=employer_auth)
def update_application_status(request: HttpRequest, application_id: UUID, payload: ApplicationStatusIn):
    application = application_service.update_application_status(
        application_id, payload.status, payload.reason, request.auth,
    )
    return action_complete(
        f"Job application status updated to {application.status}",
        {"application": application_payload(application)},
    )


def _application_listing(result) -> dict:
    return {
        "page": result.page,
        "limit": result.limit,
        "total": result.total,
        "total_pages": math.ceil(result.total / result.limit),
        "applications": [application_payload(a) for a in result.items],
    }


@router.get("/applications", auth=employer_auth)
def list_active_applications(
    request: HttpRequest,
    job_id: Optional[UUID] = None,
    employee_id: Optional[UUID] = None,
    status: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    sort_by: str = 'created_at',
    order: str = 'desc',
    page: int = 1,
    limit: int = 20,
):
    """
    Active applications to the caller's jobs (all jobs for a super admin).

    Query Parameters:
    - job_id, employee_id, status: exact filters
    - start_date, end_date: application date range, inclusive
    - search: applicant first/last name or job title
    - sort_by (created_at, updated_at, status), order (asc, desc)
    """
    result = application_service.list_applications(
        request.auth,
        active_only=True,
        job_id=job_id,
        employee_id=employee_id,
        status=status,
        start_date=start_date,
        end_date=end_date,
        search=search,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    return action_complete("Job applications fetched successfully", _application_listing(result))


@router.get("/super-admin/applications", auth=SessionTokenAuth(RoleGroups.SUPER_ADMIN))
def list_all_applications(
    request: HttpRequest,
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
):
    """Every application, including withdrawn ones; same filters plus `is_active`."""
    result = application_service.list_applications(
        request.auth,
        active_only=False,
        job_id=job_id,
        employee_id=employee_id,
        status=status,
        is_active=is_active,
        start_date=start_date,
        end_date=end_date,
        search=search,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    return action_complete("Job applications fetched successfully", _application_listing(result))


# =============================================================================
# Single job
# =============================================================================

@router.get("/{job_id}", auth=None)
def get_job(request: HttpRequest, job_id: UUID):
    job = services.get_job(job_id)
    return action_complete("Job fetched successfully", {"job": job_payload(job)})


@router.put("/{job_id}", auth=employer_auth)
def update_job(request: HttpRequest, job_id: UUID, payload: JobUpdateIn):
    job = services.update_job(job_id, payload, request.auth)
    return action_complete("Job updated successfully", {"job": job_payload(job)})


@router.post("/{job_id}/logo", auth=employer_auth)
def replace_job_logo(request: HttpRequest, job_id: UUID):
    """Multipart; file field `logo`."""
    job = services.replace_job_logo(job_id, request.FILES.getlist('logo'), request.auth)
    return action_complete("Job logo updated successfully", {"job": job_payload(job)})


@router.delete("/{job_id}", auth=employer_auth)
def delete_job(request: HttpRequest, job_id: UUID):
    services.delete_job(job_id, request.auth)
    return action_complete("Job and associated files deleted successfully.")
