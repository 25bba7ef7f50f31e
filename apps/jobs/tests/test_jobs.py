"""
Tests for posting, editing and listing jobs.
"""
import json
import os
import shutil
import tempfile
from datetime import timedelta

from django.conf import settings
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, TestCase, override_settings
from django.utils import timezone

from apps.categories.models import Category
from apps.identity.models import UserRole
from apps.identity.tests.factories import auth_headers, make_user
from apps.jobs.models import EmploymentType, Job, JobLocation, JobMode


def job_body(**overrides):
    body = {
        'title': 'Backend Engineer',
        'description': 'Build and run our APIs.',
        'requirements': 'Python, SQL',
        'min_experience': 2,
        'max_experience': 5,
        'salary_type': 'YEARLY',
        'min_salary': 800000,
        'max_salary': 1400000,
        'mode': 'REMOTE',
        'employment_type': 'FULL_TIME',
        'skills_required': ['python', 'django'],
        'openings': 2,
        'deadline': '2030-01-31',
        'company_name': 'Acme',
        'company_email': 'jobs@acme.com',
        'locations': [{'city': 'Bengaluru', 'state': 'Karnataka', 'country': 'India', 'pincode': '560001'}],
    }
    body.update(overrides)
    return body


class JobAPITestCase(TestCase):

    def setUp(self):
        self.client = Client()
        self.employer = make_user('boss@example.com', role=UserRole.EMPLOYER)
        self.other_employer = make_user('rival@example.com', role=UserRole.EMPLOYER)
        self.super_admin = make_user('root@example.com', role=UserRole.SUPER_ADMIN)

    def post_job(self, user=None, **overrides):
        return self.client.post(
            '/api/v1/job/',
            data=json.dumps(job_body(**overrides)),
            content_type='application/json',
            **auth_headers(user or self.employer),
        )

    def put_job(self, job_id, body, user=None):
        return self.client.put(
            f'/api/v1/job/{job_id}',
            data=json.dumps(body),
            content_type='application/json',
            **auth_headers(user or self.employer),
        )


class PostJobAPITest(JobAPITestCase):

    def test_employer_posts_job_with_locations(self):
        response = self.post_job()
        self.assertEqual(response.status_code, 200, response.content)

        job = response.json()['data']['job']
        self.assertEqual(job['mode'], JobMode.REMOTE)
        self.assertEqual(job['posted_by_id'], str(self.employer.id))
        self.assertEqual(len(job['locations']), 1)
        self.assertEqual(job['locations'][0]['city'], 'Bengaluru')
        self.assertIn('EMPLOYER', job['created_by'])

    def test_super_admin_can_post(self):
        response = self.post_job(user=self.super_admin)
        self.assertEqual(response.status_code, 200)

    def test_employee_cannot_post(self):
        employee = make_user('worker@example.com', role=UserRole.EMPLOYEE)
        response = self.post_job(user=employee)
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Job.objects.exists())

    def test_required_fields(self):
        for field in ['title', 'description', 'company_name', 'company_email']:
            with self.subTest(field=field):
                response = self.post_job(**{field: None})
                self.assertEqual(response.status_code, 400)
        self.assertEqual(self.post_job(locations=[]).status_code, 400)
        self.assertFalse(Job.objects.exists())

    def test_invalid_values_rejected(self):
        cases = [
            {'mode': 'SPACE'},
            {'employment_type': 'GIG'},
            {'min_experience': 6, 'max_experience': 2},
            {'min_salary': 100, 'max_salary': 50},
            {'min_salary': None, 'max_salary': -5},
            {'min_experience': None, 'max_experience': -1},
            {'min_experience': -1},
            {'openings': 0},
            {'company_email': 'not-an-email'},
        ]
        for overrides in cases:
            with self.subTest(**overrides):
                self.assertEqual(self.post_job(**overrides).status_code, 400)
        self.assertFalse(Job.objects.exists())

    def test_unknown_category(self):
        response = self.post_job(category_id='00000000-0000-0000-0000-000000000000')
        self.assertEqual(response.status_code, 404)

    def test_job_linked_to_category(self):
        category = Category.objects.create(name='BACKENDDEV', description='Server work')
        response = self.post_job(category_id=str(category.id))
        self.assertEqual(response.json()['data']['job']['category_id'], str(category.id))


class UpdateJobAPITest(JobAPITestCase):

    def setUp(self):
        super().setUp()
        self.job_id = self.post_job().json()['data']['job']['id']

    def test_owner_updates_fields_and_replaces_locations(self):
        response = self.put_job(self.job_id, {
            'title': 'Senior Backend Engineer',
            'is_active': False,
            'locations': [{'city': 'Pune'}, {'city': 'Mumbai'}],
        })
        self.assertEqual(response.status_code, 200, response.content)

        job = Job.objects.get(id=self.job_id)
        self.assertEqual(job.title, 'Senior Backend Engineer')
        self.assertEqual(job.description, 'Build and run our APIs.')
        self.assertFalse(job.is_active)
        self.assertEqual(sorted(job.locations.values_list('city', flat=True)), ['Mumbai', 'Pune'])

    def test_update_without_locations_keeps_them(self):
        self.put_job(self.job_id, {'openings': 4})
        self.assertEqual(JobLocation.objects.filter(job_id=self.job_id).count(), 1)
        self.assertEqual(Job.objects.get(id=self.job_id).openings, 4)

    def test_range_checked_against_stored_values(self):
        response = self.put_job(self.job_id, {'max_experience': 1})
        self.assertEqual(response.status_code, 400)

    def test_negative_max_rejected_on_update(self):
        response = self.put_job(self.job_id, {'min_salary': None, 'max_salary': -5})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Job.objects.get(id=self.job_id).max_salary, 1400000)

    def test_explicit_null_clears_optional_fields(self):
        category = Category.objects.create(name='BACKENDDEV', description='Server work')
        Job.objects.filter(id=self.job_id).update(category=category)

        response = self.put_job(self.job_id, {
            'deadline': None, 'salary_type': None, 'min_salary': None, 'max_salary': None, 'category_id': None,
        })
        self.assertEqual(response.status_code, 200, response.content)

        job = Job.objects.get(id=self.job_id)
        self.assertIsNone(job.deadline)
        self.assertIsNone(job.salary_type)
        self.assertIsNone(job.min_salary)
        self.assertIsNone(job.max_salary)
        self.assertIsNone(job.category)
        self.assertEqual(job.min_experience, 2)

    def test_null_leaves_required_fields_unchanged(self):
        response = self.put_job(self.job_id, {'description': None, 'mode': None, 'openings': None})
        self.assertEqual(response.status_code, 200)
        job = Job.objects.get(id=self.job_id)
        self.assertEqual(job.description, 'Build and run our APIs.')
        self.assertEqual(job.mode, JobMode.REMOTE)
        self.assertEqual(job.openings, 2)

    def test_title_is_stripped(self):
        self.put_job(self.job_id, {'title': '  Staff Engineer  '})
        self.assertEqual(Job.objects.get(id=self.job_id).title, 'Staff Engineer')

    def test_other_employer_is_forbidden(self):
        response = self.put_job(self.job_id, {'title': 'Hijacked'}, user=self.other_employer)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(Job.objects.get(id=self.job_id).title, 'Backend Engineer')

    def test_super_admin_updates_any_job(self):
        response = self.put_job(self.job_id, {'employment_type': 'CONTRACT'}, user=self.super_admin)
        self.assertEqual(response.status_code, 200)
        job = Job.objects.get(id=self.job_id)
        self.assertEqual(job.employment_type, EmploymentType.CONTRACT)
        self.assertIn('SUPER_ADMIN', job.updated_by)

    def test_unknown_job(self):
        response = self.put_job('00000000-0000-0000-0000-000000000000', {'title': 'x'})
        self.assertEqual(response.status_code, 404)


class JobLogoAndDeleteAPITest(JobAPITestCase):

    def setUp(self):
        super().setUp()
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()
        self.job_id = self.post_job().json()['data']['job']['id']

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def upload_logo(self, user=None):
        logo = SimpleUploadedFile('logo.png', b'\x89PNG\r\n\x1a\n', content_type='image/png')
        return self.client.post(
            f'/api/v1/job/{self.job_id}/logo', data={'logo': logo}, **auth_headers(user or self.employer),
        )

    def logo_path(self):
        url = Job.objects.get(id=self.job_id).logo_url
        relative = url[len(settings.MEDIA_URL):]
        return os.path.join(self.media_root, relative)

    def test_upload_logo(self):
        response = self.upload_logo()
        self.assertEqual(response.status_code, 200, response.content)
        self.assertIn('JOB_POST_LOGO', response.json()['data']['job']['logo_url'])
        self.assertTrue(os.path.exists(self.logo_path()))

    def test_other_employer_cannot_upload_logo(self):
        self.assertEqual(self.upload_logo(user=self.other_employer).status_code, 403)

    def test_delete_removes_job_locations_and_logo(self):
        self.upload_logo()
        path = self.logo_path()

        response = self.client.delete(f'/api/v1/job/{self.job_id}', **auth_headers(self.employer))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Job.objects.filter(id=self.job_id).exists())
        self.assertFalse(JobLocation.objects.filter(job_id=self.job_id).exists())
        self.assertFalse(os.path.exists(path))

    def test_other_employer_cannot_delete(self):
        response = self.client.delete(f'/api/v1/job/{self.job_id}', **auth_headers(self.other_employer))
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Job.objects.filter(id=self.job_id).exists())


class ListJobsAPITest(JobAPITestCase):

    def setUp(self):
        super().setUp()
        self.post_job(title='Remote Python', mode='REMOTE')
        self.post_job(
            title='Store Manager', mode='ON_SITE', employment_type='PART_TIME', user=self.other_employer,
            locations=[{'city': 'Chennai', 'state': 'Tamil Nadu', 'country': 'India', 'pincode': '600001'}],
        )
        self.post_job(title='Design Intern', mode='HYBRID', employment_type='INTERNSHIP')
        Job.objects.filter(title='Design Intern').update(is_active=False)

        now = timezone.now()
        for age, title in enumerate(['Design Intern', 'Store Manager', 'Remote Python']):
            Job.objects.filter(title=title).update(created_at=now - timedelta(minutes=age))

    def titles(self, query=''):
        response = self.client.get(f'/api/v1/job/{query}')
        self.assertEqual(response.status_code, 200)
        return [job['title'] for job in response.json()['data']['jobs']]

    def test_list_is_public_and_newest_first(self):
        self.assertEqual(self.titles(), ['Design Intern', 'Store Manager', 'Remote Python'])

    def test_structured_filters(self):
        self.assertEqual(self.titles('?mode=ON_SITE'), ['Store Manager'])
        self.assertEqual(self.titles('?employment_type=INTERNSHIP'), ['Design Intern'])
        self.assertEqual(self.titles('?is_active=false'), ['Design Intern'])
        self.assertEqual(self.titles(f'?posted_by={self.other_employer.id}'), ['Store Manager'])
        self.assertEqual(self.titles('?search=python'), ['Remote Python'])

    def test_location_filters(self):
        self.assertEqual(self.titles('?city=chen'), ['Store Manager'])
        self.assertEqual(self.titles('?state=karnataka&pincode=560'), ['Design Intern', 'Remote Python'])
        self.assertEqual(self.titles('?city=Chennai&state=Karnataka'), [])

    def test_pagination(self):
        response = self.client.get('/api/v1/job/?page=2&limit=2')
        data = response.json()['data']
        self.assertEqual(data['total'], 3)
        self.assertEqual([job['title'] for job in data['jobs']], ['Remote Python'])

    def test_reports_applied_limit(self):
        data = self.client.get('/api/v1/job/?limit=500&page=0').json()['data']
        self.assertEqual(data['limit'], 100)
        self.assertEqual(data['page'], 1)
        self.assertEqual(len(data['jobs']), 3)

    def test_detail(self):
        job = Job.objects.get(title='Store Manager')
        response = self.client.get(f'/api/v1/job/{job.id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['job']['locations'][0]['city'], 'Chennai')

        response = self.client.get('/api/v1/job/00000000-0000-0000-0000-000000000000')
        self.assertEqual(response.status_code, 404)
