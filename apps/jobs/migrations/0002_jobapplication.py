import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('identity', '0001_initial'),
        ('jobs', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='JobApplication',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPLIED', 'Applied'), ('WITHDRAW', 'Withdrawn'), ('RE_APPLIED', 'Re-applied'), ('REJECTED', 'Rejected'), ('RESUME_VIEWED', 'Resume viewed'), ('WAITING_EMPLOYER_ACTION', 'Waiting for employer action'), ('APPLICATION_SEND', 'Application sent'), ('CONTACT_VIEW', 'Contact viewed'), ('SELECTED', 'Selected'), ('SHORTLISTED', 'Shortlisted'), ('INTERVIEW_SCHEDULED', 'Interview scheduled'), ('INTERVIEW_COMPLETED', 'Interview completed'), ('OFFERED', 'Offered'), ('HIRED', 'Hired')], default='APPLIED', max_length=30)),
                ('status_reason', models.TextField(blank=True, default='')),
                ('how_fit_role', models.TextField(blank=True, default='')),
                ('resume_urls', models.JSONField(blank=True, default=list)),
                ('resume_preview_urls', models.JSONField(blank=True, default=list)),
                ('work_sample_urls', models.JSONField(blank=True, default=list)),
                ('work_sample_preview_urls', models.JSONField(blank=True, default=list)),
                ('is_active', models.BooleanField(default=True)),
                ('applied_by', models.CharField(blank=True, default='', max_length=255)),
                ('withdrawn_by', models.CharField(blank=True, default='', max_length=255)),
                ('updated_by', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='identity.employeeprofile')),
                ('job', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='jobs.job')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['is_active', 'status'], name='application_status_idx')],
                'constraints': [models.UniqueConstraint(fields=('job', 'employee'), name='unique_job_application')],
            },
        ),
    ]
