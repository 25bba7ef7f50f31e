from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema


class JobLocationIn(Schema):
    city: str = ""
    state: str = ""
    country: str = ""
    pincode: str = ""
    landmark: str = ""


class JobIn(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    requirements: str = ""
    responsibilities: str = ""
    education: str = ""
    min_experience: Optional[int] = None
    max_experience: Optional[int] = None
    salary_type: Optional[str] = None
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    mode: Optional[str] = None
    employment_type: Optional[str] = None
    skills_required: List[str] = []
    openings: int = 1
    deadline: Optional[date] = None
    company_name: Optional[str] = None
    company_email: Optional[str] = None
    category_id: Optional[UUID] = None
    locations: List[JobLocationIn] = []


class JobUpdateIn(Schema):
    """Only the fields sent are changed; `locations`, when sent, replaces all of them."""
    title: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    education: Optional[str] = None
    min_experience: Optional[int] = None
    max_experience: Optional[int] = None
    salary_type: Optional[str] = None
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    mode: Optional[str] = None
    employment_type: Optional[str] = None
    skills_required: Optional[List[str]] = None
    openings: Optional[int] = None
    deadline: Optional[date] = None
    company_name: Optional[str] = None
    company_email: Optional[str] = None
    category_id: Optional[UUID] = None
    is_active: Optional[bool] = None
    locations: Optional[List[JobLocationIn]] = None


class JobLocationOut(Schema):
    id: int
    city: str
    state: str
    country: str
    pincode: str
    landmark: str


class JobOut(Schema):
    id: UUID
    title: str
    description: str
    requirements: str
    responsibilities: str
    education: str
    min_experience: Optional[int] = None
    max_experience: Optional[int] = None
    salary_type: Optional[str] = None
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    mode: str
    employment_type: str
    skills_required: List[str]
    openings: int
    deadline: Optional[date] = None
    company_name: str
    company_email: str
    category_id: Optional[UUID] = None
    logo_url: Optional[str] = None
    logo_preview_url: Optional[str] = None
    is_active: bool
    posted_by_id: UUID
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime
    locations: List[JobLocationOut]

    @staticmethod
    def resolve_locations(obj):
        return list(obj.locations.all())


def job_payload(job) -> dict:
    return JobOut.from_orm(job).model_dump()


# =============================================================================
# Applications
# =============================================================================

class ApplyIn(Schema):
    job_id: Optional[UUID] = None
    how_fit_role: Optional[str] = None


class WithdrawApplicationIn(Schema):
    reason: Optional[str] = None


class ApplicationStatusIn(Schema):
    status: Optional[str] = None
    reason: Optional[str] = None


class ApplicantOut(Schema):
    id: UUID
    email: str
    first_name: str
    last_name: str


class JobApplicationOut(Schema):
    id: UUID
    job: JobOut
    employee_id: UUID
    applicant: ApplicantOut
    status: str
    status_reason: str
    how_fit_role: str
    resume_urls: List[str]
    resume_preview_urls: List[str]
    work_sample_urls: List[str]
    work_sample_preview_urls: List[str]
    is_active: bool
    applied_by: str
    withdrawn_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def resolve_job(obj):
        return job_payload(obj.job)

    @staticmethod
    def resolve_applicant(obj):
        return obj.employee.user


def application_payload(application) -> dict:
    return JobApplicationOut.from_orm(application).model_dump()
