"""
Doctor dashboard summary, its cache entry and the websocket nudge sent
whenever medical records change.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from core.services import mothers
from core.services.records import format_record, list_records_with_mother

logger = logging.getLogger(__name__)

CACHE_KEY = 'dashboard:summary'
GROUP = 'dashboard'
RECENT_LIMIT = 10
HIGH_RISK_LIMIT = 10


def build_summary() -> dict:
    return {
        'totalMothersCount': mothers.count_mothers(),
        'highestRiskRecords': [format_record(r, with_mother=True)
                               for r in mothers.highest_risk_records(HIGH_RISK_LIMIT)],
        'avgBp': mothers.average_bp(),
        'avgSugar': mothers.average_sugar(),
        'riskBreakdown': mothers.risk_breakdown(),
        'recentRecords': [format_record(r, with_mother=True)
                          for r in list_records_with_mother(RECENT_LIMIT)],
    }


def get_summary(*, refresh: bool = False) -> dict:
    if not refresh:
        cached = cache.get(CACHE_KEY)
        if cached is not None:
            return cached
    summary = build_summary()
    cache.set(CACHE_KEY, summary, settings.DASHBOARD_CACHE_SECONDS)
    return summary


def invalidate_dashboard() -> None:
    cache.delete(CACHE_KEY)


def broadcast_records_changed(*, mother_id=None, record_id=None, op: str = 'update') -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    now = timezone.now()
    event = {
        'type': 'records.changed',
        'op': op,
        'motherId': mother_id,
        'recordId': record_id,
        'ts': now.isoformat(),
    }
    try:
        async_to_sync(channel_layer.group_send)(GROUP, event)
    except Exception:
        # a dead channel layer must not fail the write that triggered it
        logger.exception('dashboard broadcast failed')


def records_changed(*, mother_id=None, record_id=None, op: str = 'update') -> None:
    """Drop the cached summary and tell connected dashboards to reload."""
    invalidate_dashboard()
    broadcast_records_changed(mother_id=mother_id, record_id=record_id, op=op)
