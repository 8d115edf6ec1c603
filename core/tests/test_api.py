"""
Integration tests for the maternal health API.

These tests exercise the endpoints a clinic front-end depends on:
mother lookups, record CRUD, record-and-predict and the doctor dashboard.
The predictor is replaced with an in-process fake so no HTTP leaves the
test process.

To run the tests:

```
pytest -q core/tests
```
"""
import datetime

from django.core.cache import cache
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from core.clients.predictor import PredictionResult
from core.exceptions import PredictorUnavailable
from core.models import AuditEvent, DoctorProfile, MedicalRecord, MotherProfile, User
from core.services import dashboard, records
from core.services.vitals import age_on


class StubPredictor:
    def __init__(self, label='High', flags=('high_bp',), error=None):
        self.label = label
        self.flags = list(flags)
        self.error = error
        self.calls = []

    def predict(self, features):
        self.calls.append(features)
        if self.error is not None:
            raise self.error
        return PredictionResult(predicted_label=self.label, predicted_proba={'High': 0.9},
                                feature_vector={'Age': features.age}, flags=self.flags)


class MaternalAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.doctor = User.objects.create_user(
            username='doc@example.com', email='doc@example.com', password='S3cure#Pass1',
            role=User.ROLE_DOCTOR, first_name='Kasun', last_name='Silva')
        self.clinic_user = User.objects.create_user(
            username='desk@example.com', email='desk@example.com', password='S3cure#Pass1',
            role=User.ROLE_CLINIC_USER)
        self.mother_user = User.objects.create_user(
            username='mom@example.com', email='mom@example.com', password='S3cure#Pass1',
            role=User.ROLE_MOTHER, first_name='Nimali', last_name='Perera')
        self.mother = MotherProfile.objects.create(
            user=self.mother_user, nic_number='920123456V', dob=datetime.date(1992, 1, 23))
        self.other_mother_user = User.objects.create_user(
            username='other@example.com', email='other@example.com', password='S3cure#Pass1',
            role=User.ROLE_MOTHER)
        self.other_mother = MotherProfile.objects.create(user=self.other_mother_user, nic_number='880000001V')

        self.predictor = StubPredictor()
        original = records.get_predictor
        records.get_predictor = lambda: self.predictor
        self.addCleanup(setattr, records, 'get_predictor', original)

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    # -- mothers ---------------------------------------------------------
    def test_staff_can_list_mothers(self):
        response = self.authenticate(self.doctor).get('/api/v1/mothers/get-all')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['ok'])
        nics = {m['nicNumber'] for m in response.data['data']}
        self.assertEqual(nics, {'920123456V', '880000001V'})

    def test_mother_cannot_list_mothers(self):
        response = self.authenticate(self.mother_user).get('/api/v1/mothers/get-all')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['ok'])

    def test_mother_reads_only_her_own_profile(self):
        client = self.authenticate(self.mother_user)
        own = client.get(f'/api/v1/mothers/get-profile/{self.mother_user.id}')
        self.assertEqual(own.status_code, status.HTTP_200_OK)
        self.assertEqual(own.data['data']['firstName'], 'Nimali')
        other = client.get(f'/api/v1/mothers/get-profile/{self.other_mother_user.id}')
        self.assertEqual(other.status_code, status.HTTP_403_FORBIDDEN)

    def test_profile_of_unknown_user_is_404(self):
        response = self.authenticate(self.doctor).get('/api/v1/mothers/get-profile/987654')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 404)

    def test_lookup_by_nic_is_case_insensitive(self):
        response = self.authenticate(self.clinic_user).get('/api/v1/mothers/by-nic/920123456v')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['id'], self.mother.id)

    # -- records ---------------------------------------------------------
    def test_create_record_derives_bp_parts(self):
        client = self.authenticate(self.doctor)
        response = client.post('/api/v1/medical-records', {
            'motherId': self.mother.id, 'bloodPressure': '130/85', 'sugarLevel': '95',
            'notes': '<script>x</script>ok'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual((data['systolic'], data['diastolic']), (130, 85))
        self.assertEqual(data['sugarLevel'], 95)
        self.assertNotIn('<script>', data['notes'])
        self.assertIsNone(data['risk'])
        self.assertTrue(AuditEvent.objects.filter(action='record_create', object_id=data['id']).exists())

    def test_create_record_for_unknown_mother_is_404(self):
        response = self.authenticate(self.doctor).post(
            '/api/v1/medical-records', {'motherId': 424242}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(MedicalRecord.objects.count(), 0)

    def test_mother_sees_own_records_but_not_others(self):
        MedicalRecord.objects.create(mother=self.mother, blood_pressure='120/80', risk='LOW')
        MedicalRecord.objects.create(mother=self.other_mother, blood_pressure='140/90', risk='HIGH')
        client = self.authenticate(self.mother_user)
        own = client.get(f'/api/v1/medical-records/mother/{self.mother.id}')
        self.assertEqual(own.status_code, status.HTTP_200_OK)
        self.assertEqual([r['risk'] for r in own.data['data']], ['LOW'])
        other = client.get(f'/api/v1/medical-records/mother/{self.other_mother.id}')
        self.assertEqual(other.status_code, status.HTTP_403_FORBIDDEN)

    def test_partial_update_only_touches_sent_fields(self):
        record = MedicalRecord.objects.create(mother=self.mother, blood_pressure='120/80',
                                              systolic=120, diastolic=80, weight=60)
        response = self.authenticate(self.doctor).patch(
            f'/api/v1/medical-records/{record.id}', {'risk': 'medium', 'weight': 62}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record.refresh_from_db()
        self.assertEqual(record.risk, 'MEDIUM')
        self.assertEqual(record.weight, 62)
        self.assertEqual(record.blood_pressure, '120/80')

    def test_update_systolic_rewrites_bp_string(self):
        record = MedicalRecord.objects.create(mother=self.mother, blood_pressure='120/80',
                                              systolic=120, diastolic=80)
        self.authenticate(self.doctor).put(
            f'/api/v1/medical-records/{record.id}', {'systolic': 135}, format='json')
        record.refresh_from_db()
        self.assertEqual(record.blood_pressure, '135/80')

    def test_update_and_delete_missing_record_is_404(self):
        client = self.authenticate(self.doctor)
        self.assertEqual(client.patch('/api/v1/medical-records/777', {'weight': 1}, format='json').status_code,
                         status.HTTP_404_NOT_FOUND)
        self.assertEqual(client.delete('/api/v1/medical-records/777').status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_record(self):
        record = MedicalRecord.objects.create(mother=self.mother)
        response = self.authenticate(self.doctor).delete(f'/api/v1/medical-records/{record.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(MedicalRecord.objects.filter(id=record.id).exists())

    def test_all_records_include_mother(self):
        MedicalRecord.objects.create(mother=self.mother, risk='LOW')
        response = self.authenticate(self.clinic_user).get('/api/v1/medical-records/all')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['mother']['nicNumber'], '920123456V')

    def test_infinite_height_is_treated_as_missing(self):
        client = self.authenticate(self.doctor)
        response = client.post('/api/v1/medical-records', {
            'motherId': self.mother.id, 'height': 'Infinity', 'weight': '-inf', 'sugarLevel': '1e400'},
            format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual((data['height'], data['weight'], data['sugarLevel']), (None, None, None))
        listing = client.get('/api/v1/medical-records/all')
        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(client.get('/api/v1/doctors/dashboard').status_code, status.HTTP_200_OK)

    def test_out_of_range_vitals_are_rejected(self):
        client = self.authenticate(self.doctor)
        for field, value in [('systolic', '1e30'), ('diastolic', 401), ('gestationalAge', '-3'),
                             ('weight', 10 ** 6)]:
            response = client.post('/api/v1/medical-records',
                                   {'motherId': self.mother.id, field: value}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, field)
            self.assertIn(field, response.data['errors'])
        self.assertEqual(MedicalRecord.objects.count(), 0)

    def test_update_with_huge_systolic_is_400(self):
        record = MedicalRecord.objects.create(mother=self.mother, systolic=120, diastolic=80)
        response = self.authenticate(self.doctor).patch(
            f'/api/v1/medical-records/{record.id}', {'systolic': '1e30'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        record.refresh_from_db()
        self.assertEqual(record.systolic, 120)

    # -- predict ---------------------------------------------------------
    def test_predict_and_save_returns_201(self):
        response = self.authenticate(self.doctor).post('/api/v1/medical-records/predict', {
            'motherKey': '920123456V', 'height': 165, 'weight': 65, 'bpStr': '150/100',
            'sugarLevel': 90, 'persist': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['prediction']['riskLabel'], 'HIGH')
        self.assertEqual(data['prediction']['flags'], ['high_bp'])
        self.assertEqual(data['record']['risk'], 'HIGH')
        self.assertEqual(self.predictor.calls[0].bp_str, '150/100')

    def test_predict_without_persist_saves_nothing(self):
        response = self.authenticate(self.doctor).post(
            f'/api/v1/medical-records/mother/{self.mother.id}/predict',
            {'height': 'not-a-number', 'persist': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['data']['record'])
        self.assertEqual(self.predictor.calls[0].height_cm, 160)
        self.assertEqual(MedicalRecord.objects.count(), 0)

    def test_predict_with_infinite_height_sends_default(self):
        response = self.authenticate(self.doctor).post(
            f'/api/v1/medical-records/mother/{self.mother.id}/predict',
            {'height': 'Infinity', 'age': 'inf', 'persist': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.predictor.calls[0]
        self.assertEqual(sent.height_cm, 160)
        self.assertEqual(sent.age, age_on(self.mother.dob))
        self.assertIsNone(response.data['data']['record']['height'])

    def test_predict_with_out_of_range_gestational_age_is_400(self):
        response = self.authenticate(self.doctor).post(
            f'/api/v1/medical-records/mother/{self.mother.id}/predict',
            {'gestationalAge': 99, 'persist': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.predictor.calls, [])

    def test_is_saving_alias_persists(self):
        response = self.authenticate(self.doctor).post(
            f'/api/v1/medical-records/mother/{self.mother.id}/predict', {'isSaving': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(MedicalRecord.objects.filter(mother=self.mother).count(), 1)

    def test_predict_for_unknown_mother_is_404_without_predictor_call(self):
        response = self.authenticate(self.doctor).post(
            '/api/v1/medical-records/predict', {'motherKey': '000000000V', 'persist': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.predictor.calls, [])

    def test_predict_requires_a_mother_reference(self):
        response = self.authenticate(self.doctor).post('/api/v1/medical-records/predict', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('motherId', response.data['errors'])

    def test_predictor_outage_is_503_and_nothing_saved(self):
        self.predictor.error = PredictorUnavailable('connection refused')
        response = self.authenticate(self.doctor).post(
            f'/api/v1/medical-records/mother/{self.mother.id}/predict', {'persist': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data['message'], 'connection refused')
        self.assertEqual(MedicalRecord.objects.count(), 0)

    def test_mother_cannot_run_predictions(self):
        response = self.authenticate(self.mother_user).post(
            f'/api/v1/medical-records/mother/{self.mother.id}/predict', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # -- dashboard -------------------------------------------------------
    def test_dashboard_summary(self):
        MedicalRecord.objects.create(mother=self.mother, systolic=120, diastolic=80, sugar_level=90, risk='LOW')
        MedicalRecord.objects.create(mother=self.other_mother, systolic=140, diastolic=100, sugar_level=110,
                                     risk='HIGH')
        response = self.authenticate(self.doctor).get('/api/v1/doctors/dashboard')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['totalMothersCount'], 2)
        self.assertEqual(data['avgBp'], {'systolic': 130.0, 'diastolic': 90.0})
        self.assertEqual(data['avgSugar'], 100.0)
        self.assertEqual(data['riskBreakdown'], {'LOW': 1, 'MEDIUM': 0, 'HIGH': 1, 'UNKNOWN': 0})
        self.assertEqual([r['motherId'] for r in data['highestRiskRecords']], [self.other_mother.id])
        self.assertEqual(len(data['recentRecords']), 2)

    def test_dashboard_cache_is_dropped_on_record_write(self):
        client = self.authenticate(self.doctor)
        client.get('/api/v1/doctors/dashboard')
        self.assertIsNotNone(cache.get(dashboard.CACHE_KEY))
        client.post('/api/v1/medical-records', {'motherId': self.mother.id, 'weight': 61}, format='json')
        self.assertIsNone(cache.get(dashboard.CACHE_KEY))
        fresh = client.get('/api/v1/doctors/dashboard')
        self.assertEqual(len(fresh.data['data']['recentRecords']), 1)

    def test_doctor_profile(self):
        DoctorProfile.objects.create(user=self.doctor, license_number='SLMC-9', specialty='Obstetrics')
        response = self.authenticate(self.mother_user).get(f'/api/v1/doctors/profile/{self.doctor.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['licenseNumber'], 'SLMC-9')
