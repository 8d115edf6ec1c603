"""
Mother directory: profile creation, lookups and the aggregates that feed
the doctor dashboard.  Lookups return ``None`` for unknown mothers; the
caller decides whether that is an error.
"""
import logging
from typing import Optional

from django.db.models import Avg, Count

from core.models import MedicalRecord, MotherProfile

logger = logging.getLogger(__name__)


def create_mother_profile(*, user, nic_number: str, dob=None, phone=None, address=None) -> MotherProfile:
    return MotherProfile.objects.create(
        user=user,
        nic_number=nic_number,
        dob=dob,
        phone=phone or None,
        address=address or None,
    )


def find_mother_by_id(mother_id) -> Optional[MotherProfile]:
    try:
        return MotherProfile.objects.select_related('user').filter(id=int(mother_id)).first()
    except (TypeError, ValueError):
        return None


def find_mother_by_nic(nic_number: str) -> Optional[MotherProfile]:
    nic = (nic_number or '').strip()
    if not nic:
        return None
    return MotherProfile.objects.select_related('user').filter(nic_number__iexact=nic).first()


def find_mother_by_user_id(user_id) -> Optional[MotherProfile]:
    try:
        return MotherProfile.objects.select_related('user').filter(user_id=int(user_id)).first()
    except (TypeError, ValueError):
        return None


def list_mothers():
    return list(MotherProfile.objects.select_related('user').order_by('-created_at', '-id'))


def count_mothers() -> int:
    return MotherProfile.objects.count()


def highest_risk_records(limit: Optional[int] = None):
    qs = (MedicalRecord.objects.filter(risk=MedicalRecord.RISK_HIGH)
          .select_related('mother__user')
          .order_by('-recorded_at', '-id'))
    return list(qs[:limit] if limit else qs)


def average_bp() -> dict:
    agg = MedicalRecord.objects.aggregate(systolic=Avg('systolic'), diastolic=Avg('diastolic'))
    return {k: (round(v, 1) if v is not None else None) for k, v in agg.items()}


def average_sugar() -> Optional[float]:
    value = MedicalRecord.objects.aggregate(v=Avg('sugar_level'))['v']
    return round(value, 1) if value is not None else None


def risk_breakdown() -> dict:
    counts = {label: 0 for label, _ in MedicalRecord.RISK_CHOICES}
    for row in MedicalRecord.objects.exclude(risk__isnull=True).values('risk').annotate(n=Count('id')):
        counts[row['risk']] = row['n']
    return counts


def format_mother(mother: MotherProfile) -> dict:
    user = mother.user
    return {
        'id': mother.id,
        'userId': mother.user_id,
        'email': user.email,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'nicNumber': mother.nic_number,
        'dob': mother.dob.isoformat() if mother.dob else None,
        'phone': mother.phone,
        'address': mother.address,
        'createdAt': mother.created_at.isoformat() if mother.created_at else None,
    }
