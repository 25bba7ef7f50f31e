from django.contrib import admin

from .models import Job, JobApplication, JobLocation


class JobLocationInline(admin.TabularInline):
    model = JobLocation
    extra = 0


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ['title', 'company_name', 'mode', 'employment_type', 'openings', 'is_active', 'created_at']
    list_filter = ['mode', 'employment_type', 'is_active']
    search_fields = ['title', 'company_name', 'company_email']
    raw_id_fields = ['posted_by', 'category']
    inlines = [JobLocationInline]


@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ['job', 'employee', 'status', 'is_active', 'created_at']
    list_filter = ['status', 'is_active']
    search_fields = ['job__title', 'employee__user__email']
    raw_id_fields = ['job', 'employee']
