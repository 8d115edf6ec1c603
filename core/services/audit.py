import logging
from typing import Optional, Any, Dict

from django.contrib.auth import get_user_model
from core.models import AuditEvent

User = get_user_model()
logger = logging.getLogger(__name__)


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=user if isinstance(user, User) else None,
        action=action,
        object_type=object_type, object_id=object_id,
        detail=detail or {},
    )


def try_log_action(**kwargs) -> Optional[AuditEvent]:
    """Like ``log_action`` but an audit failure never breaks the caller."""
    try:
        return log_action(**kwargs)
    except Exception:
        logger.exception('audit write failed for action=%s', kwargs.get('action'))
        return None
