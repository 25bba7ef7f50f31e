"""
Tests for one-time code issuance and verification.
"""
from datetime import timedelta
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings
from django.utils import timezone

from apps.core.errors import BadRequest, NotFound, ParameterMissing
from apps.identity import otp_service
from apps.identity.models import CodeAction, OneTimeCode, User, UserRole
from apps.identity.tasks import purge_expired_codes
from apps.identity.tests.fakes import RecordingCodeSender

RECORDING_SENDER = 'apps.identity.tests.fakes.RecordingCodeSender'
FAILING_SENDER = 'apps.identity.tests.fakes.FailingCodeSender'


@override_settings(OTP_CODE_SENDER=RECORDING_SENDER)
class IssueCodeTest(TestCase):

    def setUp(self):
        RecordingCodeSender.reset()

    def test_code_shape_and_expiry(self):
        before = timezone.now()
        issued = otp_service.issue_code('alice@example.com', CodeAction.REGISTER)

        stored = OneTimeCode.objects.get(email='alice@example.com')
        self.assertEqual(len(stored.code), 6)
        self.assertRegex(stored.code, r'^[A-Z0-9]{6}$')
        self.assertEqual(stored.action, CodeAction.REGISTER)
        self.assertTrue(issued.delivered)
        expected = before + timedelta(minutes=5)
        self.assertAlmostEqual(stored.expires_at.timestamp(), expected.timestamp(), delta=5)

    def test_two_requests_store_two_distinct_codes(self):
        otp_service.issue_code('alice@example.com', CodeAction.REGISTER)
        otp_service.issue_code('alice@example.com', CodeAction.REGISTER)

        codes = list(OneTimeCode.objects.filter(email='alice@example.com').values_list('code', flat=True))
        self.assertEqual(len(codes), 2)
        self.assertNotEqual(codes[0], codes[1])

    def test_first_code_unusable_after_second_issued(self):
        otp_service.issue_code('alice@example.com', CodeAction.REGISTER)
        first = RecordingCodeSender.last_code()
        otp_service.issue_code('alice@example.com', CodeAction.REGISTER)

        with self.assertRaises(BadRequest):
            otp_service.consume_code('alice@example.com', CodeAction.REGISTER, first)
        self.assertFalse(OneTimeCode.objects.filter(email='alice@example.com').exists())

    def test_latest_code_is_accepted_and_consumed(self):
        otp_service.issue_code('alice@example.com', CodeAction.REGISTER)
        otp_service.issue_code('alice@example.com', CodeAction.REGISTER)
        latest = RecordingCodeSender.last_code()

        otp_service.consume_code('alice@example.com', CodeAction.REGISTER, latest)
        self.assertFalse(OneTimeCode.objects.filter(email='alice@example.com').exists())

    def test_register_or_login_resolves_to_register_for_new_email(self):
        issued = otp_service.issue_code('new@example.com', CodeAction.REGISTER_OR_LOGIN)
        self.assertEqual(issued.action, CodeAction.REGISTER)

    def test_register_or_login_resolves_to_login_for_known_email(self):
        User.objects.create_user(email='known@example.com', role=UserRole.USER)
        issued = otp_service.issue_code('known@example.com', CodeAction.REGISTER_OR_LOGIN)
        self.assertEqual(issued.action, CodeAction.LOGIN)
        self.assertTrue(OneTimeCode.objects.filter(email='known@example.com', action=CodeAction.LOGIN).exists())

    def test_unknown_action_is_parameter_missing(self):
        with self.assertRaises(ParameterMissing):
            otp_service.issue_code('alice@example.com', 'DANCE')
        with self.assertRaises(ParameterMissing):
            otp_service.issue_code('', CodeAction.LOGIN)

    def test_email_outside_allowed_format_is_rejected(self):
        for email in ['not-an-email', 'a@b.xyz', 'x@example.c', 'a' * 60 + '@example.com']:
            with self.subTest(email=email):
                with self.assertRaises(BadRequest):
                    otp_service.issue_code(email, CodeAction.LOGIN)
        self.assertEqual(OneTimeCode.objects.count(), 0)

    def test_expired_codes_are_swept_on_issue(self):
        OneTimeCode.objects.create(
            email='old@example.com', code='OLD123', action=CodeAction.LOGIN,
            expires_at=timezone.now() - timedelta(minutes=1),
        )
        otp_service.issue_code('alice@example.com', CodeAction.REGISTER)
        self.assertFalse(OneTimeCode.objects.filter(code='OLD123').exists())

    def test_collision_regenerates_code(self):
        OneTimeCode.objects.create(
            email='other@example.com', code='AAAAAA', action=CodeAction.LOGIN,
            expires_at=timezone.now() + timedelta(minutes=5),
        )
        with mock.patch('apps.identity.otp_service.generate_code', side_effect=['AAAAAA', 'BBBBBB']):
            otp_service.issue_code('alice@example.com', CodeAction.REGISTER)

        self.assertEqual(OneTimeCode.objects.get(email='alice@example.com').code, 'BBBBBB')


class CodeDeliveryTest(TestCase):

    @override_settings(OTP_CODE_SENDER=FAILING_SENDER)
    def test_delivery_failure_still_stores_code(self):
        issued = otp_service.issue_code('alice@example.com', CodeAction.LOGIN)
        self.assertFalse(issued.delivered)
        self.assertTrue(OneTimeCode.objects.filter(email='alice@example.com').exists())

    @override_settings(
        OTP_CODE_SENDER='apps.identity.notifications.EmailCodeSender',
        EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
    )
    def test_email_sender_mails_the_code(self):
        issued = otp_service.issue_code('alice@example.com', CodeAction.EMPLOYEE_REGISTER)

        self.assertTrue(issued.delivered)
        self.assertEqual(len(mail.outbox), 1)
        code = OneTimeCode.objects.get(email='alice@example.com').code
        self.assertIn(code, mail.outbox[0].body)
        self.assertEqual(mail.outbox[0].to, ['alice@example.com'])


class ConsumeCodeTest(TestCase):

    def _store(self, code='ABC123', minutes=5, action=CodeAction.LOGIN):
        return OneTimeCode.objects.create(
            email='alice@example.com', code=code, action=action,
            expires_at=timezone.now() + timedelta(minutes=minutes),
        )

    def test_missing_code_is_not_found(self):
        with self.assertRaises(NotFound):
            otp_service.consume_code('alice@example.com', CodeAction.LOGIN, 'ABC123')

    def test_expired_code_is_rejected_and_deleted(self):
        self._store(minutes=-1)
        with self.assertRaises(BadRequest) as ctx:
            otp_service.consume_code('alice@example.com', CodeAction.LOGIN, 'ABC123')
        self.assertIn('expired', ctx.exception.msg)
        self.assertEqual(OneTimeCode.objects.count(), 0)

    def test_wrong_code_is_rejected_and_deleted(self):
        self._store()
        with self.assertRaises(BadRequest):
            otp_service.consume_code('alice@example.com', CodeAction.LOGIN, 'ZZZ999')
        self.assertEqual(OneTimeCode.objects.count(), 0)

    def test_code_scoped_by_action(self):
        self._store(action=CodeAction.FORGOT_PASSWORD)
        with self.assertRaises(NotFound):
            otp_service.consume_code('alice@example.com', CodeAction.LOGIN, 'ABC123')
        self.assertEqual(OneTimeCode.objects.count(), 1)

    def test_purge_removes_only_expired(self):
        self._store(code='LIVE01')
        self._store(code='DEAD01', minutes=-10)
        self.assertEqual(otp_service.purge_expired(), 1)
        self.assertEqual(list(OneTimeCode.objects.values_list('code', flat=True)), ['LIVE01'])

    def test_scheduled_purge_task(self):
        self._store(code='LIVE01')
        self._store(code='DEAD01', minutes=-10)
        self._store(code='DEAD02', minutes=-1)
        self.assertEqual(purge_expired_codes(), 2)
        self.assertEqual(list(OneTimeCode.objects.values_list('code', flat=True)), ['LIVE01'])
