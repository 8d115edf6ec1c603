import datetime

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from core.clients.predictor import PredictionResult, close_predictor
from core.models import DoctorProfile, MotherProfile, User

PASSWORD = 'S3cure#Pass1'


@pytest.fixture(autouse=True)
def _isolate_shared_state():
    # throttle counters and the dashboard summary live in the cache
    cache.clear()
    yield
    cache.clear()
    close_predictor()


@pytest.fixture
def mother_user(db):
    return User.objects.create_user(username='mom@example.com', email='mom@example.com',
                                    password=PASSWORD, role=User.ROLE_MOTHER,
                                    first_name='Nimali', last_name='Perera')


@pytest.fixture
def mother(mother_user):
    return MotherProfile.objects.create(user=mother_user, nic_number='920123456V',
                                        dob=datetime.date(1992, 1, 23))


@pytest.fixture
def doctor_user(db):
    user = User.objects.create_user(username='doc@example.com', email='doc@example.com',
                                    password=PASSWORD, role=User.ROLE_DOCTOR,
                                    first_name='Kasun', last_name='Silva')
    DoctorProfile.objects.create(user=user, license_number='SLMC-001', specialty='Obstetrics')
    return user


@pytest.fixture
def staff_client(doctor_user):
    client = APIClient()
    client.force_authenticate(user=doctor_user)
    return client


@pytest.fixture
def mother_client(mother_user):
    client = APIClient()
    client.force_authenticate(user=mother_user)
    return client


class FakePredictor:
    """Records every feature vector it receives; answers or raises on demand."""

    def __init__(self, label='Low', flags=None, error=None):
        self.label = label
        self.flags = flags or []
        self.error = error
        self.calls = []

    def predict(self, features):
        self.calls.append(features)
        if self.error is not None:
            raise self.error
        return PredictionResult(
            predicted_label=self.label,
            predicted_proba={'High': 0.1, 'Low': 0.8, 'Medium': 0.1},
            feature_vector={'Age': features.age, 'BMI': 24.0},
            flags=list(self.flags),
            override_applied=False,
            code=200,
            message='OK',
        )


@pytest.fixture
def fake_predictor(monkeypatch):
    fake = FakePredictor()
    monkeypatch.setattr('core.services.records.get_predictor', lambda: fake)
    return fake
