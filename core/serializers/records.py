from django.conf import settings
from rest_framework import serializers

from core.services.records import VitalsInput
from core.services.vitals import number_or_none, parse_bp


class LooseNumberField(serializers.Field):
    """Numeric input where blanks and non-numbers count as absent.

    Numbers outside ``min_value``..``max_value`` are rejected rather than dropped.
    """
    default_error_messages = {
        'max_value': 'Ensure this value is less than or equal to {max_value}.',
        'min_value': 'Ensure this value is greater than or equal to {min_value}.',
    }

    def __init__(self, min_value=None, max_value=None, **kwargs):
        self.min_value = min_value
        self.max_value = max_value
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def check_range(self, n):
        if self.max_value is not None and n > self.max_value:
            self.fail('max_value', max_value=self.max_value)
        if self.min_value is not None and n < self.min_value:
            self.fail('min_value', min_value=self.min_value)
        return n

    def validate_empty_values(self, data):
        if data is serializers.empty:
            return super().validate_empty_values(data)
        if number_or_none(data) is None:
            return (True, None)
        return (False, data)

    def to_internal_value(self, data):
        return self.check_range(number_or_none(data))

    def to_representation(self, value):
        return value


class LooseIntField(LooseNumberField):
    def to_internal_value(self, data):
        n = self.check_range(number_or_none(data))
        return int(n)


def _bp_string(v):
    v = (v or '').strip()
    if v and parse_bp(v) is None:
        raise serializers.ValidationError('Blood pressure must look like "120/80"')
    return v or None


# plausible bounds for a single antenatal reading
BP_LIMITS = {'min_value': 0, 'max_value': 400}
WEEKS_LIMITS = {'min_value': 0, 'max_value': 50}
HEIGHT_LIMITS = {'min_value': 0, 'max_value': 300}
WEIGHT_LIMITS = {'min_value': 0, 'max_value': 500}
SUGAR_LIMITS = {'min_value': 0, 'max_value': 2000}
AGE_LIMITS = {'min_value': 0, 'max_value': 120}


class RecordWriteSerializer(serializers.Serializer):
    bloodPressure = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=16)
    systolic = LooseIntField(**BP_LIMITS)
    diastolic = LooseIntField(**BP_LIMITS)
    height = LooseNumberField(**HEIGHT_LIMITS)
    weight = LooseNumberField(**WEIGHT_LIMITS)
    sugarLevel = LooseNumberField(**SUGAR_LIMITS)
    gestationalAge = LooseIntField(**WEEKS_LIMITS)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    FIELD_MAP = {
        'bloodPressure': 'blood_pressure',
        'systolic': 'systolic',
        'diastolic': 'diastolic',
        'height': 'height',
        'weight': 'weight',
        'sugarLevel': 'sugar_level',
        'gestationalAge': 'gestational_age',
        'notes': 'notes',
        'risk': 'risk',
    }

    def validate_bloodPressure(self, v):
        return _bp_string(v)

    def model_fields(self) -> dict:
        """Only the keys the caller sent, with model field names."""
        return {self.FIELD_MAP[k]: v for k, v in self.validated_data.items() if k in self.FIELD_MAP}


class RecordCreateSerializer(RecordWriteSerializer):
    motherId = serializers.IntegerField()


class RecordUpdateSerializer(RecordWriteSerializer):
    risk = serializers.CharField(required=False, allow_null=True, max_length=16)


class RecordPredictSerializer(serializers.Serializer):
    motherId = serializers.IntegerField(required=False, allow_null=True)
    motherKey = serializers.CharField(required=False, allow_blank=True, max_length=20)
    motherNic = serializers.CharField(required=False, allow_blank=True, max_length=20)
    age = LooseNumberField(**AGE_LIMITS)
    height = LooseNumberField(**HEIGHT_LIMITS)
    weight = LooseNumberField(**WEIGHT_LIMITS)
    bpStr = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=16)
    systolic = LooseIntField(**BP_LIMITS)
    diastolic = LooseIntField(**BP_LIMITS)
    sugarLevel = LooseNumberField(**SUGAR_LIMITS)
    gestationalAge = LooseIntField(**WEEKS_LIMITS)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    persist = serializers.BooleanField(required=False, allow_null=True, default=None)
    isSaving = serializers.BooleanField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        mother_id = self.context.get('mother_id', attrs.get('motherId'))
        nic = (attrs.get('motherKey') or attrs.get('motherNic') or '').strip()
        if mother_id is None and not nic:
            raise serializers.ValidationError({'motherId': ['motherId or motherKey is required']})
        attrs['motherId'] = mother_id
        attrs['motherKey'] = nic or None
        return attrs

    def to_vitals(self) -> VitalsInput:
        v = self.validated_data
        persist = v.get('persist')
        if persist is None:
            persist = v.get('isSaving')
        if persist is None:
            persist = settings.RECORD_PERSIST_DEFAULT
        return VitalsInput(
            mother_id=v['motherId'],
            mother_nic=v['motherKey'],
            age=v.get('age'),
            height=v.get('height'),
            weight=v.get('weight'),
            bp_str=(v.get('bpStr') or '').strip() or None,
            systolic=v.get('systolic'),
            diastolic=v.get('diastolic'),
            sugar_level=v.get('sugarLevel'),
            gestational_age=v.get('gestationalAge'),
            notes=v.get('notes'),
            persist=bool(persist),
        )
