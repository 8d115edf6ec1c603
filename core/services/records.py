"""
Medical record store and the record-and-predict workflow.

``create_record_and_predict`` runs its collaborators strictly in order:
mother lookup, predictor call, then (only when asked to persist) the
record insert.  Each step commits on its own; any failure ends the call
with an exception and nothing is returned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import bleach
from django.db import DatabaseError
from rest_framework.exceptions import NotFound

from core.clients.predictor import PredictRequest, PredictionResult, get_predictor
from core.exceptions import PersistenceFailure, SubjectNotFound
from core.models import MedicalRecord, MotherProfile
from core.services import mothers
from core.services.risk import normalize_risk_label
from core.services.vitals import age_on, format_bp, parse_bp

logger = logging.getLogger(__name__)

FALLBACK_AGE = 25
DEFAULT_HEIGHT_CM = 160
DEFAULT_WEIGHT_KG = 60
DEFAULT_BP = '110/70'
DEFAULT_SUGAR_MG_DL = 90

VITAL_FIELDS = ('blood_pressure', 'systolic', 'diastolic', 'height', 'weight',
                'sugar_level', 'gestational_age', 'notes')


@dataclass
class VitalsInput:
    """Caller supplied vitals; every measurement is optional."""
    mother_id: Optional[int] = None
    mother_nic: Optional[str] = None
    age: Optional[float] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    bp_str: Optional[str] = None
    systolic: Optional[int] = None
    diastolic: Optional[int] = None
    sugar_level: Optional[float] = None
    gestational_age: Optional[int] = None
    notes: Optional[str] = None
    persist: bool = False


@dataclass
class PredictionDetail:
    risk_label: str
    predicted_proba: dict = field(default_factory=dict)
    feature_vector: dict = field(default_factory=dict)
    flags: list = field(default_factory=list)
    override_applied: bool = False

    def as_dict(self) -> dict:
        return {
            'riskLabel': self.risk_label,
            'predictedProba': self.predicted_proba,
            'featureVector': self.feature_vector,
            'flags': self.flags,
            'overrideApplied': self.override_applied,
        }


@dataclass
class PredictOutcome:
    record: Optional[MedicalRecord]
    prediction: PredictionDetail


# ---------------------------------------------------------------------
# Record store
# ---------------------------------------------------------------------
def _clean_notes(notes):
    if notes is None:
        return None
    return bleach.clean(str(notes).strip(), strip=True)


def _fill_bp(values: dict) -> dict:
    """Derive the string form from the parts or the parts from the string."""
    bp = values.get('blood_pressure')
    if bp:
        parsed = parse_bp(bp)
        if parsed and values.get('systolic') is None and values.get('diastolic') is None:
            values['systolic'], values['diastolic'] = parsed
    elif values.get('systolic') is not None and values.get('diastolic') is not None:
        values['blood_pressure'] = format_bp(values['systolic'], values['diastolic'])
    return values


def create_medical_record(mother: MotherProfile, *, risk: Optional[str] = None, **vitals) -> MedicalRecord:
    values = {k: vitals.get(k) for k in VITAL_FIELDS}
    values['notes'] = _clean_notes(values['notes'])
    _fill_bp(values)
    return MedicalRecord.objects.create(
        mother=mother,
        risk=normalize_risk_label(risk) if risk is not None else None,
        **values,
    )


def create_record_for_mother(mother_id, **vitals) -> MedicalRecord:
    mother = mothers.find_mother_by_id(mother_id)
    if mother is None:
        raise SubjectNotFound(f'Mother not found: {mother_id}')
    return create_medical_record(mother, **vitals)


def list_records_for_mother(mother_id):
    return list(MedicalRecord.objects.filter(mother_id=mother_id).order_by('-recorded_at', '-id'))


def list_records_with_mother(limit: Optional[int] = None):
    qs = MedicalRecord.objects.select_related('mother__user').order_by('-recorded_at', '-id')
    return list(qs[:limit] if limit else qs)


def get_record_or_404(record_id) -> MedicalRecord:
    record = MedicalRecord.objects.select_related('mother').filter(id=record_id).first()
    if record is None:
        raise NotFound('Medical record not found')
    return record


def update_medical_record(record_id, changes: dict) -> MedicalRecord:
    """Apply only the keys present in ``changes``."""
    record = get_record_or_404(record_id)
    update_fields = []
    for key in VITAL_FIELDS:
        if key in changes:
            value = _clean_notes(changes[key]) if key == 'notes' else changes[key]
            setattr(record, key, value)
            update_fields.append(key)
    if 'blood_pressure' in changes and not ({'systolic', 'diastolic'} & changes.keys()):
        parsed = parse_bp(record.blood_pressure)
        record.systolic, record.diastolic = parsed if parsed else (None, None)
        update_fields += ['systolic', 'diastolic']
    elif {'systolic', 'diastolic'} & changes.keys() and 'blood_pressure' not in changes:
        record.blood_pressure = format_bp(record.systolic, record.diastolic)
        update_fields.append('blood_pressure')
    if 'risk' in changes:
        record.risk = normalize_risk_label(changes['risk']) if changes['risk'] is not None else None
        update_fields.append('risk')
    if update_fields:
        record.save(update_fields=sorted(set(update_fields)) + ['updated_at'])
    return record


def delete_medical_record(record_id) -> None:
    record = get_record_or_404(record_id)
    record.delete()


def format_record(record: MedicalRecord, *, with_mother: bool = False) -> dict:
    data = {
        'id': record.id,
        'motherId': record.mother_id,
        'bloodPressure': record.blood_pressure,
        'systolic': record.systolic,
        'diastolic': record.diastolic,
        'height': record.height,
        'weight': record.weight,
        'sugarLevel': record.sugar_level,
        'gestationalAge': record.gestational_age,
        'notes': record.notes,
        'risk': record.risk,
        'recordedAt': record.recorded_at.isoformat() if record.recorded_at else None,
        'updatedAt': record.updated_at.isoformat() if record.updated_at else None,
    }
    if with_mother:
        user = record.mother.user
        data['mother'] = {
            'id': record.mother_id,
            'nicNumber': record.mother.nic_number,
            'firstName': user.first_name,
            'lastName': user.last_name,
            'email': user.email,
        }
    return data


# ---------------------------------------------------------------------
# Record-and-predict workflow
# ---------------------------------------------------------------------
def resolve_mother(vitals: VitalsInput) -> MotherProfile:
    if vitals.mother_id is not None:
        mother = mothers.find_mother_by_id(vitals.mother_id)
        key = vitals.mother_id
    else:
        mother = mothers.find_mother_by_nic(vitals.mother_nic or '')
        key = vitals.mother_nic
    if mother is None:
        raise SubjectNotFound(f'Mother not found: {key}')
    return mother


def build_features(mother: MotherProfile, vitals: VitalsInput, today=None) -> PredictRequest:
    """Fill every gap in ``vitals`` with the predictor defaults."""
    age = vitals.age
    if age is None:
        age = age_on(mother.dob, today)
    if age is None:
        age = FALLBACK_AGE

    return PredictRequest(
        age=age,
        height_cm=vitals.height if vitals.height is not None else DEFAULT_HEIGHT_CM,
        weight_kg=vitals.weight if vitals.weight is not None else DEFAULT_WEIGHT_KG,
        bp_str=vitals.bp_str or DEFAULT_BP,
        sugar_mg_dL=vitals.sugar_level if vitals.sugar_level is not None else DEFAULT_SUGAR_MG_DL,
    )


def create_record_and_predict(vitals: VitalsInput, *, predictor=None, today=None) -> PredictOutcome:
    logger.info('record+predict for mother id=%s nic=%s persist=%s',
                vitals.mother_id, vitals.mother_nic, vitals.persist)
    mother = resolve_mother(vitals)
    features = build_features(mother, vitals, today=today)

    predictor = predictor or get_predictor()
    result: PredictionResult = predictor.predict(features)
    label = normalize_risk_label(result.predicted_label)
    logger.info('mother %s predicted %r -> %s', mother.id, result.predicted_label, label)

    record = None
    if vitals.persist:
        try:
            record = create_medical_record(
                mother,
                risk=label,
                blood_pressure=vitals.bp_str or None,
                systolic=vitals.systolic,
                diastolic=vitals.diastolic,
                height=vitals.height,
                weight=vitals.weight,
                sugar_level=vitals.sugar_level,
                gestational_age=vitals.gestational_age,
                notes=vitals.notes,
            )
        except DatabaseError as exc:
            logger.error('saving record for mother %s failed: %s', mother.id, exc)
            raise PersistenceFailure(f'Medical record could not be saved: {exc}') from exc

    return PredictOutcome(
        record=record,
        prediction=PredictionDetail(
            risk_label=label,
            predicted_proba=result.predicted_proba,
            feature_vector=result.feature_vector,
            flags=result.flags,
            override_applied=result.override_applied,
        ),
    )
