"""
Database models for the maternal health records service.

Users carry a role that decides which profile is attached to them: a
mother profile, a doctor profile or a clinic.  Medical records belong to
a mother and keep the vitals exactly as they were captured together with
a normalized risk label.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model keyed by email with a role tag.

    ``username`` mirrors the email so that Django's default
    authentication backend can be used unchanged.
    """
    ROLE_MOTHER = 'MOTHER'
    ROLE_DOCTOR = 'DOCTOR'
    ROLE_CLINIC_USER = 'CLINIC_USER'
    ROLE_CHOICES = [
        (ROLE_MOTHER, 'Mother'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_CLINIC_USER, 'Clinic user'),
    ]
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_MOTHER, db_index=True)

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class MotherProfile(models.Model):
    """Mother specific data.  ``nic_number`` is the natural key used by clinics."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='mother_profile')
    dob = models.DateField(null=True, blank=True)
    nic_number = models.CharField(max_length=20, unique=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    address = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user.email} ({self.nic_number})"


class DoctorProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    license_number = models.CharField(max_length=50, unique=True)
    specialty = models.CharField(max_length=100, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Dr. {self.user.get_full_name() or self.user.email} ({self.license_number})"


class Clinic(models.Model):
    """A clinic owned by a user with the CLINIC_USER role."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='clinic')
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True, null=True)
    address = models.CharField(max_length=255, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    clinic_code = models.CharField(max_length=50, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.clinic_code})"


class MedicalRecord(models.Model):
    """One assessment of a mother's vitals.

    Vitals are stored as provided, never with the defaults that were sent
    to the predictor.  ``risk`` is always one of the ``RISK_CHOICES``
    values or null.
    """
    RISK_LOW = 'LOW'
    RISK_MEDIUM = 'MEDIUM'
    RISK_HIGH = 'HIGH'
    RISK_UNKNOWN = 'UNKNOWN'
    RISK_CHOICES = [
        (RISK_LOW, 'Low'),
        (RISK_MEDIUM, 'Medium'),
        (RISK_HIGH, 'High'),
        (RISK_UNKNOWN, 'Unknown'),
    ]

    mother = models.ForeignKey(MotherProfile, on_delete=models.CASCADE, related_name='medical_records')
    blood_pressure = models.CharField(max_length=16, blank=True, null=True, help_text="e.g. '120/80'")
    systolic = models.PositiveIntegerField(null=True, blank=True)
    diastolic = models.PositiveIntegerField(null=True, blank=True)
    height = models.FloatField(null=True, blank=True, help_text="cm")
    weight = models.FloatField(null=True, blank=True, help_text="kg")
    sugar_level = models.FloatField(null=True, blank=True, help_text="mg/dL")
    gestational_age = models.PositiveIntegerField(null=True, blank=True, help_text="weeks")
    notes = models.TextField(blank=True, null=True)
    risk = models.CharField(max_length=10, choices=RISK_CHOICES, blank=True, null=True, db_index=True)
    recorded_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['mother', 'recorded_at'], name='core_medica_mother__5b0c1e_idx'),
            models.Index(fields=['risk', 'recorded_at'], name='core_medica_risk_3f8a2d_idx'),
        ]

    def __str__(self) -> str:
        return f"record {self.pk} mother={self.mother_id} risk={self.risk}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='core_audite_action_7c1d4e_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='core_audite_object__9e2b6a_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
