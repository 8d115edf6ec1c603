from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from core.exceptions import SubjectNotFound
from core.permissions import IsClinicalStaff, IsMotherRole, is_clinical
from core.responses import ok
from core.services import mothers


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def list_mothers_view(request):
    data = [mothers.format_mother(m) for m in mothers.list_mothers()]
    return ok(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff | IsMotherRole])
def mother_profile_view(request, user_id: int):
    """Profile by user id; a mother may only read her own."""
    if not is_clinical(request.user) and request.user.id != user_id:
        raise PermissionDenied('Insufficient permissions')
    mother = mothers.find_mother_by_user_id(user_id)
    if mother is None:
        raise SubjectNotFound()
    return ok(mothers.format_mother(mother))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def mother_by_nic_view(request, nic: str):
    mother = mothers.find_mother_by_nic(nic)
    if mother is None:
        raise SubjectNotFound(f'Mother not found: {nic}')
    return ok(mothers.format_mother(mother))
