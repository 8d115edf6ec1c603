import bleach
from rest_framework import serializers

from core.models import User


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES], default=User.ROLE_MOTHER)
    firstName = serializers.CharField(required=False, allow_blank=True, max_length=150)
    lastName = serializers.CharField(required=False, allow_blank=True, max_length=150)
    # mother
    nicNumber = serializers.CharField(required=False, allow_blank=True, max_length=20)
    dob = serializers.DateField(required=False, allow_null=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    # doctor
    licenseNumber = serializers.CharField(required=False, allow_blank=True, max_length=50)
    specialty = serializers.CharField(required=False, allow_blank=True, max_length=100)
    # clinic
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    clinicCode = serializers.CharField(required=False, allow_blank=True, max_length=50)

    REQUIRED_BY_ROLE = {
        User.ROLE_MOTHER: ('nicNumber',),
        User.ROLE_DOCTOR: ('licenseNumber',),
        User.ROLE_CLINIC_USER: ('name', 'location', 'clinicCode'),
    }

    def validate_firstName(self, v):
        return _clean(v)

    def validate_lastName(self, v):
        return _clean(v)

    def validate_address(self, v):
        return _clean(v)

    def validate(self, attrs):
        missing = {f: ['This field is required.']
                   for f in self.REQUIRED_BY_ROLE[attrs['role']] if not (attrs.get(f) or '').strip()}
        if missing:
            raise serializers.ValidationError(missing)
        return attrs

    def profile_fields(self) -> dict:
        """Role specific fields, renamed for the account service."""
        v = self.validated_data
        role = v['role']
        if role == User.ROLE_MOTHER:
            return {'nic_number': v['nicNumber'].strip(), 'dob': v.get('dob'),
                    'phone': v.get('phone'), 'address': v.get('address')}
        if role == User.ROLE_DOCTOR:
            return {'license_number': v['licenseNumber'].strip(), 'specialty': v.get('specialty')}
        return {'name': _clean(v['name']), 'location': _clean(v['location']),
                'clinic_code': v['clinicCode'].strip(),
                'phone': v.get('phone'), 'address': v.get('address')}


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField()

    def validate(self, attrs):
        identifier = (attrs.get('email') or attrs.get('username') or '').strip()
        if not identifier:
            raise serializers.ValidationError({'email': ['This field is required.']})
        attrs['identifier'] = identifier
        return attrs


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)
