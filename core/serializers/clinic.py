import bleach
from rest_framework import serializers


class ClinicCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    location = serializers.CharField(max_length=255)
    clinicCode = serializers.CharField(max_length=50)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Clinic name is required')
        return v

    def validate_location(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate_address(self, v):
        return bleach.clean((v or '').strip(), strip=True)
