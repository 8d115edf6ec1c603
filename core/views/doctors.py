from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated

from core.models import DoctorProfile
from core.permissions import IsClinicalStaff
from core.responses import ok
from core.services import dashboard
from core.services.accounts import format_doctor


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def doctor_profile_view(request, user_id: int):
    doctor = DoctorProfile.objects.select_related('user').filter(user_id=user_id).first()
    if doctor is None:
        raise NotFound('Doctor not found')
    return ok(format_doctor(doctor))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def doctor_dashboard_view(request):
    """Summary of mothers and records for clinical staff.

    Served from cache; any record write drops the entry.  ``?refresh=1``
    forces a rebuild.
    """
    refresh = (request.query_params.get('refresh') or '0') in ['1', 'true', 'True']
    return ok(dashboard.get_summary(refresh=refresh))
