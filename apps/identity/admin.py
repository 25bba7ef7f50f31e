from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import Address, AdminProfile, Credential, EmployeeProfile, EmployerProfile, OneTimeCode, User


class AddressInline(admin.StackedInline):
    model = Address
    can_delete = False
    extra = 0


@admin.register(User)
class PortalUserAdmin(UserAdmin):
    list_display = ['email', 'first_name', 'last_name', 'role', 'auth_provider', 'is_active', 'date_joined']
    list_filter = ['role', 'auth_provider', 'is_active']
    search_fields = ['email', 'first_name', 'last_name', 'mobile_number']
    ordering = ['-date_joined']
    inlines = [AddressInline]
    fieldsets = UserAdmin.fieldsets + (
        ('Portal', {'fields': (
            'role', 'auth_provider', 'country_code', 'mobile_number',
            'alternative_mobile_number', 'email_verified_at', 'created_by',
        )}),
    )


@admin.register(EmployeeProfile)
class EmployeeProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'industry', 'function_area', 'experience', 'tc_policy']
    search_fields = ['user__email', 'industry', 'function_area']


@admin.register(EmployerProfile)
class EmployerProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'company_name', 'industry', 'tc_policy']
    search_fields = ['user__email', 'company_name']


@admin.register(AdminProfile)
class AdminProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'linkedin_url', 'tc_policy']


@admin.register(OneTimeCode)
class OneTimeCodeAdmin(admin.ModelAdmin):
    list_display = ['email', 'action', 'expires_at', 'created_at']
    list_filter = ['action']
    search_fields = ['email']
    readonly_fields = ['code', 'created_at']


@admin.register(Credential)
class CredentialAdmin(admin.ModelAdmin):
    list_display = ['user', 'updated_at']
    readonly_fields = ['password_hash', 'previous_hashes', 'created_at', 'updated_at']
