from typing import Optional

from core.models import MedicalRecord

KNOWN_LABELS = frozenset({MedicalRecord.RISK_LOW, MedicalRecord.RISK_MEDIUM, MedicalRecord.RISK_HIGH})


def normalize_risk_label(label: Optional[str]) -> str:
    """Map any predictor label onto LOW / MEDIUM / HIGH / UNKNOWN.

    Matching is case-insensitive but otherwise exact, so ``" low "`` or
    ``"Lowish"`` are UNKNOWN.  Never raises.
    """
    if not isinstance(label, str):
        return MedicalRecord.RISK_UNKNOWN
    upper = label.upper()
    return upper if upper in KNOWN_LABELS else MedicalRecord.RISK_UNKNOWN
