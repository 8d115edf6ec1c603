"""
Django admin registrations for the core models.

Superusers can inspect users, profiles, medical records and the audit
trail under ``/admin/``.
"""

from django.contrib import admin

from .models import AuditEvent, Clinic, DoctorProfile, MedicalRecord, MotherProfile, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'role', 'first_name', 'last_name', 'is_active', 'is_superuser')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'first_name', 'last_name')


@admin.register(MotherProfile)
class MotherProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'nic_number', 'dob', 'phone', 'created_at')
    search_fields = ('nic_number', 'user__email', 'user__first_name', 'user__last_name')


@admin.register(DoctorProfile)
class DoctorProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'license_number', 'specialty')
    search_fields = ('license_number', 'user__email')


@admin.register(Clinic)
class ClinicAdmin(admin.ModelAdmin):
    list_display = ('name', 'clinic_code', 'location', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'clinic_code', 'location')


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'mother', 'blood_pressure', 'sugar_level', 'risk', 'recorded_at')
    list_filter = ('risk',)
    search_fields = ('mother__nic_number', 'mother__user__email')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    readonly_fields = ('detail',)
