"""
Medical record endpoints.

Plain CRUD for clinical staff plus the record-and-predict endpoints.
Every write drops the cached dashboard summary, pushes a
``records.changed`` event and leaves an audit entry.
"""
from __future__ import annotations

import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from core.exceptions import SubjectNotFound
from core.permissions import IsClinicalStaff, IsMotherRole, is_clinical
from core.responses import ok
from core.serializers.records import RecordCreateSerializer, RecordPredictSerializer, RecordUpdateSerializer
from core.services import dashboard, mothers, records
from core.services.audit import try_log_action

logger = logging.getLogger(__name__)


def _after_write(request, *, action: str, record_id, mother_id, detail=None):
    dashboard.records_changed(mother_id=mother_id, record_id=record_id, op=action)
    try_log_action(user=request.user, action=f'record_{action}', object_type='medical_record',
                   object_id=record_id, detail={'motherId': mother_id, **(detail or {})})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def create_record_view(request):
    s = RecordCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    record = records.create_record_for_mother(s.validated_data['motherId'], **s.model_fields())
    _after_write(request, action='create', record_id=record.id, mother_id=record.mother_id)
    return ok(records.format_record(record), message='Medical record created', status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff | IsMotherRole])
def mother_records_view(request, mother_id: int):
    """Records of one mother, newest first.  Staff, or the mother herself."""
    mother = mothers.find_mother_by_id(mother_id)
    if mother is None:
        raise SubjectNotFound(f'Mother not found: {mother_id}')
    if not is_clinical(request.user) and mother.user_id != request.user.id:
        raise PermissionDenied('Insufficient permissions')
    data = [records.format_record(r) for r in records.list_records_for_mother(mother.id)]
    return ok(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def all_records_view(request):
    data = [records.format_record(r, with_mother=True) for r in records.list_records_with_mother()]
    return ok(data)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def record_detail_view(request, record_id: int):
    if request.method == 'DELETE':
        record = records.get_record_or_404(record_id)
        mother_id = record.mother_id
        records.delete_medical_record(record_id)
        _after_write(request, action='delete', record_id=record_id, mother_id=mother_id)
        return ok(None, message='Medical record deleted')

    s = RecordUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    changes = s.model_fields()
    record = records.update_medical_record(record_id, changes)
    _after_write(request, action='update', record_id=record.id, mother_id=record.mother_id,
                 detail={'fields': sorted(changes)})
    return ok(records.format_record(record), message='Medical record updated')


def _predict(request, mother_id=None):
    context = {'mother_id': mother_id} if mother_id is not None else {}
    s = RecordPredictSerializer(data=request.data, context=context)
    s.is_valid(raise_exception=True)
    outcome = records.create_record_and_predict(s.to_vitals())

    data = {
        'record': records.format_record(outcome.record) if outcome.record else None,
        'prediction': outcome.prediction.as_dict(),
    }
    if outcome.record is None:
        try_log_action(user=request.user, action='risk_predict', object_type='mother',
                       object_id=None, detail={'risk': outcome.prediction.risk_label})
        return ok(data, message='Prediction completed')

    _after_write(request, action='create', record_id=outcome.record.id,
                 mother_id=outcome.record.mother_id, detail={'risk': outcome.record.risk})
    return ok(data, message='Medical record created with prediction', status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def predict_view(request):
    return _predict(request)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def mother_predict_view(request, mother_id: int):
    return _predict(request, mother_id=mother_id)


# ScopedRateThrottle reads throttle_scope from the wrapped view class
predict_view.cls.throttle_scope = 'predict'
mother_predict_view.cls.throttle_scope = 'predict'
