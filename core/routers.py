"""
URL mappings for the maternal health API.

Every business endpoint lives under ``/api/v1``; trailing slashes are
omitted.
"""
from django.urls import include, path

from .views import auth, clinics, doctors, health, mothers, records

api_v1 = [
    # Authentication
    path('auth/register', auth.register_view, name='auth-register'),
    path('auth/login', auth.login_view, name='auth-login'),
    path('auth/refresh', auth.refresh_view, name='auth-refresh'),
    path('auth/logout', auth.logout_view, name='auth-logout'),
    path('auth/me', auth.me_view, name='auth-me'),
    # Mothers
    path('mothers/get-all', mothers.list_mothers_view, name='mothers-list'),
    path('mothers/get-profile/<int:user_id>', mothers.mother_profile_view, name='mothers-profile'),
    path('mothers/by-nic/<str:nic>', mothers.mother_by_nic_view, name='mothers-by-nic'),
    # Doctors
    path('doctors/profile/<int:user_id>', doctors.doctor_profile_view, name='doctors-profile'),
    path('doctors/dashboard', doctors.doctor_dashboard_view, name='doctors-dashboard'),
    # Clinics
    path('clinics/create', clinics.create_clinic_view, name='clinics-create'),
    # Medical records
    path('medical-records', records.create_record_view, name='records-create'),
    path('medical-records/all', records.all_records_view, name='records-all'),
    path('medical-records/predict', records.predict_view, name='records-predict'),
    path('medical-records/mother/<int:mother_id>', records.mother_records_view, name='records-by-mother'),
    path('medical-records/mother/<int:mother_id>/predict', records.mother_predict_view,
         name='records-predict-for-mother'),
    path('medical-records/<int:record_id>', records.record_detail_view, name='records-detail'),
]

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    path('api/v1/', include(api_v1)),
]
