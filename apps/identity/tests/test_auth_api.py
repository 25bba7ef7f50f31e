"""
Integration tests for the registration and sign-in endpoints.
"""
import json
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, TestCase, override_settings

from apps.identity.jwt_auth import decode_token
from apps.identity.models import AuthProvider, CodeAction, EmployeeProfile, OneTimeCode, User, UserRole
from apps.identity.tests.factories import make_user, stored_code
from apps.identity.tests.fakes import FakeGoogleVerifier, RecordingCodeSender

FAKES = {
    'OTP_CODE_SENDER': 'apps.identity.tests.fakes.RecordingCodeSender',
    'IDENTITY_VERIFIER': 'apps.identity.tests.fakes.FakeGoogleVerifier',
}


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type='application/json')


@override_settings(**FAKES)
class SendOtpAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        RecordingCodeSender.reset()

    def test_send_otp_returns_success_envelope(self):
        response = self.client.post('/api/v1/auth/send-otp?email=alice@example.com&action=REGISTER')
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['status'], 200)
        self.assertTrue(data['data']['delivered'])
        self.assertEqual(len(RecordingCodeSender.sent), 1)

    def test_send_otp_missing_action(self):
        response = self.client.post('/api/v1/auth/send-otp?email=alice@example.com')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

    def test_send_otp_bad_email(self):
        response = self.client.post('/api/v1/auth/send-otp?email=alice@nowhere.zz&action=LOGIN')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['msg'], 'Invalid Request')

    @override_settings(OTP_CODE_SENDER='apps.identity.tests.fakes.FailingCodeSender')
    def test_send_otp_delivery_failure_is_not_an_error(self):
        response = self.client.post('/api/v1/auth/send-otp?email=alice@example.com&action=LOGIN')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()['data']['delivered'])


@override_settings(**FAKES)
class RegisterOrLoginAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        RecordingCodeSender.reset()
        FakeGoogleVerifier.claims_by_token = {}

    def test_wrong_code_then_correct_code_registers_alice(self):
        self.client.post('/api/v1/auth/send-otp?email=alice@example.com&action=REGISTER')

        response = post_json(self.client, '/api/v1/auth/register-or-login',
                             {'email': 'alice@example.com', 'otp': 'WRONG1'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(OneTimeCode.objects.filter(email='alice@example.com').exists())
        self.assertFalse(User.objects.filter(email='alice@example.com').exists())

        self.client.post('/api/v1/auth/send-otp?email=alice@example.com&action=REGISTER')
        response = post_json(self.client, '/api/v1/auth/register-or-login',
                             {'email': 'alice@example.com', 'otp': RecordingCodeSender.last_code()})
        self.assertEqual(response.status_code, 200)

        claims = decode_token(response.json()['data']['token'])
        self.assertEqual(claims['email'], 'alice@example.com')
        self.assertEqual(claims['role'], UserRole.USER)
        self.assertEqual(claims['exp'] - claims['iat'], 30 * 24 * 60 * 60)
        user = User.objects.get(email='alice@example.com')
        self.assertEqual(user.auth_provider, AuthProvider.OTP)
        self.assertIsNotNone(user.email_verified_at)

    def test_existing_user_logs_in_with_login_code(self):
        make_user('bob@example.com', role=UserRole.USER)
        self.client.post('/api/v1/auth/send-otp?email=bob@example.com&action=REGISTER-OR-LOGIN')
        self.assertEqual(RecordingCodeSender.sent[-1]['action'], CodeAction.LOGIN)

        response = post_json(self.client, '/api/v1/auth/register-or-login',
                             {'email': 'bob@example.com', 'otp': RecordingCodeSender.last_code()})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Logged in successfully.')
        self.assertEqual(User.objects.filter(email='bob@example.com').count(), 1)

    def test_login_updates_last_login(self):
        user = make_user('bob@example.com', role=UserRole.USER)
        stored_code('bob@example.com', CodeAction.LOGIN)
        post_json(self.client, '/api/v1/auth/register-or-login', {'email': 'bob@example.com', 'otp': 'ABC123'})
        user.refresh_from_db()
        self.assertIsNotNone(user.last_login)

    def test_google_token_with_unseen_email_creates_user(self):
        FakeGoogleVerifier.register('google-token-1', 'gina@example.com', 'Gina Lee')

        response = post_json(self.client, '/api/v1/auth/register-or-login', {'google_token': 'google-token-1'})
        self.assertEqual(response.status_code, 200)

        user = User.objects.get(email='gina@example.com')
        self.assertEqual(user.role, UserRole.USER)
        self.assertTrue(user.is_active)
        self.assertEqual(user.auth_provider, AuthProvider.GOOGLE)
        self.assertEqual(user.first_name, 'Gina')
        self.assertEqual(decode_token(response.json()['data']['token'])['sub'], str(user.id))

    def test_invalid_google_token(self):
        response = post_json(self.client, '/api/v1/auth/register-or-login', {'google_token': 'forged'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

    def test_missing_fields(self):
        response = post_json(self.client, '/api/v1/auth/register-or-login', {'email': 'alice@example.com'})
        self.assertEqual(response.status_code, 400)

    def test_no_code_on_record_is_not_found(self):
        response = post_json(self.client, '/api/v1/auth/register-or-login',
                             {'email': 'alice@example.com', 'otp': 'ABC123'})
        self.assertEqual(response.status_code, 404)


@override_settings(**FAKES)
class EmployeeRegistrationAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def form(self, **extra):
        data = {
            'email': 'erin@example.com',
            'first_name': 'Erin',
            'last_name': 'Stone',
            'otp': 'ABC123',
            'city': 'Pune',
            'state': 'MH',
            'country': 'India',
            'pincode': '411001',
            'industry': 'Software',
            'function_area': 'Engineering',
            'gender': 'FEMALE',
            'current_ctc': '1200000',
            'tc_policy': 'true',
        }
        data.update(extra)
        return data

    def test_register_employee_with_files(self):
        stored_code('erin@example.com', CodeAction.EMPLOYEE_REGISTER)
        data = self.form(
            password='secret1',
            confirm_password='secret1',
            resume_files=SimpleUploadedFile('cv.pdf', b'%PDF-1.4 resume', content_type='application/pdf'),
        )

        response = self.client.post('/api/v1/auth/employee/register', data=data)
        self.assertEqual(response.status_code, 200, response.content)

        body = response.json()['data']
        self.assertEqual(body['user']['role'], UserRole.EMPLOYEE)
        self.assertEqual(body['user']['address']['city'], 'Pune')

        profile = EmployeeProfile.objects.get(user__email='erin@example.com')
        self.assertTrue(profile.tc_policy)
        self.assertEqual(len(profile.resume_urls), 1)
        self.assertIn('EMPLOYEE_RESUME', profile.resume_urls[0])
        self.assertEqual(profile.resume_urls, profile.resume_preview_urls)
        self.assertTrue(User.objects.get(email='erin@example.com').credential.password_hash)

    def test_registering_same_email_twice_conflicts(self):
        stored_code('erin@example.com', CodeAction.EMPLOYEE_REGISTER)
        first = self.client.post('/api/v1/auth/employee/register', data=self.form())
        self.assertEqual(first.status_code, 200)

        stored_code('erin@example.com', CodeAction.EMPLOYEE_REGISTER, code='XYZ789')
        second = self.client.post('/api/v1/auth/employee/register', data=self.form(otp='XYZ789'))
        self.assertEqual(second.status_code, 409)
        self.assertEqual(User.objects.filter(email='erin@example.com').count(), 1)

    def test_short_password_rejected_before_code_is_used(self):
        stored_code('erin@example.com', CodeAction.EMPLOYEE_REGISTER)
        response = self.client.post(
            '/api/v1/auth/employee/register',
            data=self.form(password='abc', confirm_password='abc'),
        )
        self.assertEqual(response.status_code, 400)
        self.assertTrue(OneTimeCode.objects.filter(email='erin@example.com').exists())
        self.assertFalse(User.objects.filter(email='erin@example.com').exists())

    def test_mismatched_confirmation_rejected(self):
        stored_code('erin@example.com', CodeAction.EMPLOYEE_REGISTER)
        response = self.client.post(
            '/api/v1/auth/employee/register',
            data=self.form(password='secret1', confirm_password='secret2'),
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('do not match', response.json()['msg'])

    def test_disallowed_file_type_rejected(self):
        stored_code('erin@example.com', CodeAction.EMPLOYEE_REGISTER)
        data = self.form(resume_files=SimpleUploadedFile('run.exe', b'MZ', content_type='application/x-msdownload'))
        response = self.client.post('/api/v1/auth/employee/register', data=data)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(User.objects.filter(email='erin@example.com').exists())

    def test_missing_required_fields(self):
        response = self.client.post('/api/v1/auth/employee/register', data={'email': 'erin@example.com'})
        self.assertEqual(response.status_code, 400)


@override_settings(**FAKES)
class EmployerRegistrationAPITest(TestCase):

    def setUp(self):
        self.client = Client()

    def test_register_employer(self):
        stored_code('emma@example.com', CodeAction.EMPLOYER_REGISTER)
        response = self.client.post('/api/v1/auth/employer/register', data={
            'email': 'emma@example.com',
            'first_name': 'Emma',
            'last_name': 'Hart',
            'otp': 'ABC123',
            'company_name': 'Acme Hiring',
            'city': 'Austin',
        })
        self.assertEqual(response.status_code, 200, response.content)

        user = response.json()['data']['user']
        self.assertEqual(user['role'], UserRole.EMPLOYER)
        self.assertEqual(user['employer_profile']['company_name'], 'Acme Hiring')
        self.assertIsNone(user['employee_profile'])

    def test_company_name_required(self):
        stored_code('emma@example.com', CodeAction.EMPLOYER_REGISTER)
        response = self.client.post('/api/v1/auth/employer/register', data={
            'email': 'emma@example.com', 'first_name': 'Emma', 'last_name': 'Hart', 'otp': 'ABC123',
        })
        self.assertEqual(response.status_code, 400)

    def test_code_for_another_action_is_not_accepted(self):
        stored_code('emma@example.com', CodeAction.EMPLOYEE_REGISTER)
        response = self.client.post('/api/v1/auth/employer/register', data={
            'email': 'emma@example.com', 'first_name': 'Emma', 'last_name': 'Hart',
            'otp': 'ABC123', 'company_name': 'Acme',
        })
        self.assertEqual(response.status_code, 404)


@override_settings(**FAKES)
class LoginAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        FakeGoogleVerifier.claims_by_token = {}
        self.user = make_user('lee@example.com', role=UserRole.EMPLOYER, password='secret1')

    def test_password_and_code_login(self):
        stored_code('lee@example.com', CodeAction.LOGIN)
        response = post_json(self.client, '/api/v1/auth/login',
                             {'email': 'lee@example.com', 'password': 'secret1', 'otp': 'ABC123'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(decode_token(response.json()['data']['token'])['role'], UserRole.EMPLOYER)

    def test_password_login_requires_code(self):
        response = post_json(self.client, '/api/v1/auth/login',
                             {'email': 'lee@example.com', 'password': 'secret1'})
        self.assertEqual(response.status_code, 400)

    def test_wrong_password(self):
        stored_code('lee@example.com', CodeAction.LOGIN)
        response = post_json(self.client, '/api/v1/auth/login',
                             {'email': 'lee@example.com', 'password': 'nope123', 'otp': 'ABC123'})
        self.assertEqual(response.status_code, 401)
        self.assertTrue(OneTimeCode.objects.filter(email='lee@example.com').exists())

    def test_password_not_set(self):
        make_user('nopass@example.com', role=UserRole.EMPLOYEE)
        response = post_json(self.client, '/api/v1/auth/login',
                             {'email': 'nopass@example.com', 'password': 'secret1', 'otp': 'ABC123'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('Password not set', response.json()['msg'])

    def test_code_only_login(self):
        stored_code('lee@example.com', CodeAction.LOGIN)
        response = post_json(self.client, '/api/v1/auth/login', {'email': 'lee@example.com', 'otp': 'ABC123'})
        self.assertEqual(response.status_code, 200)

    def test_unknown_email(self):
        response = post_json(self.client, '/api/v1/auth/login', {'email': 'ghost@example.com', 'otp': 'ABC123'})
        self.assertEqual(response.status_code, 404)

    def test_no_credentials(self):
        response = post_json(self.client, '/api/v1/auth/login', {})
        self.assertEqual(response.status_code, 400)

    def test_google_login_creates_employee_with_profile(self):
        FakeGoogleVerifier.register('g-emp', 'newhire@example.com', 'New Hire')
        response = post_json(self.client, '/api/v1/auth/login', {'google_token': 'g-emp'})
        self.assertEqual(response.status_code, 200)

        user = User.objects.get(email='newhire@example.com')
        self.assertEqual(user.role, UserRole.EMPLOYEE)
        self.assertTrue(EmployeeProfile.objects.filter(user=user).exists())


@override_settings(**FAKES)
class InactiveAccountTest(TestCase):
    """An inactive account never receives a session token."""

    def setUp(self):
        self.client = Client()
        FakeGoogleVerifier.claims_by_token = {}
        make_user('sleepy@example.com', role=UserRole.EMPLOYEE, is_active=False, password='secret1')

    def assert_refused(self, response):
        self.assertEqual(response.status_code, 401)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertNotIn('data', body)

    def test_google_branch(self):
        FakeGoogleVerifier.register('g-sleepy', 'sleepy@example.com', 'Sleepy')
        self.assert_refused(post_json(self.client, '/api/v1/auth/login', {'google_token': 'g-sleepy'}))
        self.assert_refused(post_json(self.client, '/api/v1/auth/register-or-login', {'google_token': 'g-sleepy'}))

    def test_password_branch(self):
        stored_code('sleepy@example.com', CodeAction.LOGIN)
        self.assert_refused(post_json(self.client, '/api/v1/auth/login',
                                      {'email': 'sleepy@example.com', 'password': 'secret1', 'otp': 'ABC123'}))

    def test_code_branch(self):
        stored_code('sleepy@example.com', CodeAction.LOGIN)
        self.assert_refused(post_json(self.client, '/api/v1/auth/login',
                                      {'email': 'sleepy@example.com', 'otp': 'ABC123'}))

    def test_register_or_login_branch(self):
        stored_code('sleepy@example.com', CodeAction.LOGIN)
        self.assert_refused(post_json(self.client, '/api/v1/auth/register-or-login',
                                      {'email': 'sleepy@example.com', 'otp': 'ABC123'}))
