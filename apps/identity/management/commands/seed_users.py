from django.core.management.base import BaseCommand
from django.db import transaction

from apps.identity import passwords
from apps.identity.models import (
    AdminProfile, AuthProvider, EmployeeProfile, EmployerProfile, User, UserRole,
)
from apps.identity.permissions import PROFILE_RELATION

PROFILE_MODELS = {
    'employee_profile': EmployeeProfile,
    'employer_profile': EmployerProfile,
    'admin_profile': AdminProfile,
}


class Command(BaseCommand):
    help = 'Seeds one administrator-created account per role for local development'

    def add_arguments(self, parser):
        parser.add_argument('--domain', default='jobportal.local', help='Email domain for seeded accounts')
        parser.add_argument('--password', default='password', help='Password stored for every seeded account')

    def handle(self, *args, **options):
        for role in UserRole.values:
            email = f"{role.lower().replace('_', '-')}@{options['domain']}"
            with transaction.atomic():
                user, created = User.objects.get_or_create(
                    email=email,
                    defaults={
                        'username': email,
                        'first_name': role.title().replace('_', ' '),
                        'last_name': 'Seed',
                        'role': role,
                        'auth_provider': AuthProvider.ADMIN_CREATED,
                        'created_by': 'seed_users',
                    },
                )
                if role == UserRole.SUPER_ADMIN:
                    user.is_staff = True
                    user.is_superuser = True
                    user.set_password(options['password'])
                user.mark_email_verified()
                user.save()

                relation = PROFILE_RELATION.get(role)
                if relation:
                    PROFILE_MODELS[relation].objects.get_or_create(user=user, defaults={'created_by': 'seed_users'})
                if passwords.get_credential(user) is None:
                    passwords.create_credential(user, options['password'], created_by='seed_users')

            if created:
                self.stdout.write(self.style.SUCCESS(f'Created user: {email} (Role: {role})'))
            else:
                self.stdout.write(self.style.WARNING(f'Updated user: {email}'))
