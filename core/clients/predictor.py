"""
HTTP client for the external maternal risk predictor.

The predictor is an opaque service reached with ``POST {base}/predict``.
Every HTTP status is read back so callers always get the same style of
error: transport problems raise :class:`PredictorUnavailable`, anything
the service itself refuses raises :class:`PredictorRejected`.  There is
no retry and no caching.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, asdict
from typing import Optional

import requests
from django.conf import settings

from core.exceptions import PredictorRejected, PredictorUnavailable

logger = logging.getLogger(__name__)


@dataclass
class PredictRequest:
    age: float
    height_cm: float
    weight_kg: float
    bp_str: str
    sugar_mg_dL: float

    def to_payload(self) -> dict:
        return asdict(self)


@dataclass
class PredictionResult:
    predicted_label: Optional[str]
    predicted_proba: dict = field(default_factory=dict)
    feature_vector: dict = field(default_factory=dict)
    flags: list = field(default_factory=list)
    override_applied: bool = False
    code: Optional[int] = None
    message: str = ''

    @classmethod
    def from_body(cls, body: dict) -> 'PredictionResult':
        data = body.get('data') or {}
        return cls(
            predicted_label=data.get('predicted_label'),
            predicted_proba=data.get('predicted_proba') or {},
            feature_vector=data.get('feature_vector') or {},
            flags=list(data.get('flags') or []),
            override_applied=bool(data.get('override_applied', False)),
            code=body.get('code'),
            message=body.get('message') or '',
        )


class PredictorClient:
    path = '/predict'

    def __init__(self, base_url: Optional[str] = None, timeout_ms: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or settings.PREDICT_API_BASE).rstrip('/')
        self.timeout_ms = int(timeout_ms if timeout_ms is not None else settings.PREDICT_API_TIMEOUT_MS)
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f'{self.base_url}{self.path}'

    def predict(self, features: PredictRequest) -> PredictionResult:
        logger.info('predict -> %s', self.url)
        started = time.monotonic()
        try:
            resp = self.session.post(
                self.url,
                json=features.to_payload(),
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout_ms / 1000,
            )
        except requests.RequestException as exc:
            logger.warning('predict transport failure: %s', exc)
            raise PredictorUnavailable(str(exc)) from exc

        elapsed_ms = (time.monotonic() - started) * 1000
        body = _json_or_none(resp)
        app_code = body.get('code') if isinstance(body, dict) else None
        logger.info('predict <- HTTP %s code %s (%.0f ms)', resp.status_code, app_code, elapsed_ms)

        if not body or resp.status_code >= 400 or (isinstance(app_code, (int, float)) and app_code >= 400):
            raise PredictorRejected(http_status=resp.status_code, app_code=app_code)
        return PredictionResult.from_body(body)

    def close(self) -> None:
        self.session.close()


def _json_or_none(resp) -> Optional[dict]:
    if not resp.content:
        return None
    try:
        body = resp.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


_client: Optional[PredictorClient] = None
_client_lock = threading.Lock()


def get_predictor() -> PredictorClient:
    """Process-wide client, built on first use from settings."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = PredictorClient()
    return _client


def close_predictor() -> None:
    """Tear down the process-wide client; the next ``get_predictor`` rebuilds it."""
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None
