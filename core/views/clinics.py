from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated

from core.models import Clinic
from core.permissions import IsClinicUser
from core.responses import ok
from core.serializers.clinic import ClinicCreateSerializer
from core.services.accounts import create_clinic, format_clinic
from core.services.audit import try_log_action


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsClinicUser])
def create_clinic_view(request):
    if Clinic.objects.filter(user=request.user).exists():
        raise ValidationError({'detail': 'Clinic already exists for this user'})
    s = ClinicCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    clinic = create_clinic(
        user=request.user,
        name=v['name'],
        location=v['location'],
        clinic_code=v['clinicCode'].strip(),
        phone=v.get('phone'),
        address=v.get('address'),
    )
    try_log_action(user=request.user, action='clinic_create', object_type='clinic',
                   object_id=clinic.id, detail={'clinicCode': clinic.clinic_code})
    return ok(format_clinic(clinic), message='Clinic created', status=201)
