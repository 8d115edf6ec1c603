"""
Registration and login.

Registration creates the user and its role profile in one transaction so
a failed profile insert never leaves an orphaned account behind.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from core.authentication import issue_tokens
from core.models import Clinic, DoctorProfile, User
from core.services import mothers
from core.services.audit import try_log_action

logger = logging.getLogger(__name__)


def email_in_use(email: str) -> bool:
    return User.objects.filter(email__iexact=email).exists()


def _create_role_profile(user: User, profile: dict):
    if user.role == User.ROLE_MOTHER:
        if mothers.find_mother_by_nic(profile['nic_number']) is not None:
            raise ValidationError({'nicNumber': ['NIC number already registered']})
        return mothers.create_mother_profile(
            user=user,
            nic_number=profile['nic_number'],
            dob=profile.get('dob'),
            phone=profile.get('phone'),
            address=profile.get('address'),
        )
    if user.role == User.ROLE_DOCTOR:
        return DoctorProfile.objects.create(
            user=user,
            license_number=profile['license_number'],
            specialty=profile.get('specialty') or None,
        )
    return create_clinic(user=user, **profile)


def create_clinic(*, user: User, name: str, location: str, clinic_code: str,
                  phone: Optional[str] = None, address: Optional[str] = None) -> Clinic:
    if Clinic.objects.filter(clinic_code__iexact=clinic_code).exists():
        raise ValidationError({'clinicCode': ['Clinic code already in use']})
    return Clinic.objects.create(
        user=user,
        name=name,
        location=location,
        clinic_code=clinic_code,
        phone=phone or None,
        address=address or None,
    )


def register_user(*, email: str, password: str, role: str, first_name: str = '',
                  last_name: str = '', profile: Optional[dict] = None) -> User:
    email = email.strip().lower()
    if email_in_use(email):
        raise ValidationError({'email': ['Email already in use']})
    user = User(username=email, email=email, role=role,
                first_name=first_name or '', last_name=last_name or '')
    try:
        validate_password(password, user=user)
    except DjangoValidationError as exc:
        raise ValidationError({'password': list(exc.messages)})
    user.set_password(password)

    try:
        with transaction.atomic():
            user.save()
            _create_role_profile(user, profile or {})
    except IntegrityError as exc:
        logger.warning('registration of %s rejected: %s', email, exc)
        raise ValidationError({'detail': 'Account could not be created: duplicate data'})

    logger.info('registered %s as %s', email, role)
    try_log_action(user=user, action='register', object_type='user', object_id=user.id,
                   detail={'role': role})
    return user


def login(request, *, identifier: str, password: str) -> dict:
    identifier = (identifier or '').strip().lower()
    ip = request.META.get('REMOTE_ADDR') if request is not None else None
    user = authenticate(request, username=identifier, password=password)
    if user is None:
        try_log_action(user=None, action='login', object_type='user', object_id=None,
                       detail={'result': 'fail', 'username': identifier, 'ip': ip})
        raise ValidationError({'detail': 'Invalid email or password'})

    try_log_action(user=user, action='login', object_type='user', object_id=user.id,
                   detail={'result': 'ok', 'ip': ip})
    refresh = issue_tokens(user)
    return {
        'access': str(refresh.access_token),
        'refresh': str(refresh),
        'role': user.role,
        'user': format_user(user),
    }


def format_user(user: User) -> dict:
    return {
        'id': user.id,
        'email': user.email,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'role': user.role,
    }


def format_user_with_profile(user: User) -> dict:
    data = format_user(user)
    if user.role == User.ROLE_MOTHER:
        mother = mothers.find_mother_by_user_id(user.id)
        data['profile'] = mothers.format_mother(mother) if mother else None
    elif user.role == User.ROLE_DOCTOR:
        doctor = DoctorProfile.objects.filter(user=user).first()
        data['profile'] = format_doctor(doctor) if doctor else None
    else:
        clinic = Clinic.objects.filter(user=user).first()
        data['profile'] = format_clinic(clinic) if clinic else None
    return data


def format_doctor(doctor: DoctorProfile) -> dict:
    return {
        'id': doctor.id,
        'userId': doctor.user_id,
        'firstName': doctor.user.first_name,
        'lastName': doctor.user.last_name,
        'email': doctor.user.email,
        'licenseNumber': doctor.license_number,
        'specialty': doctor.specialty,
    }


def format_clinic(clinic: Clinic) -> dict:
    return {
        'id': clinic.id,
        'userId': clinic.user_id,
        'name': clinic.name,
        'location': clinic.location,
        'phone': clinic.phone,
        'address': clinic.address,
        'clinicCode': clinic.clinic_code,
        'isActive': clinic.is_active,
    }
