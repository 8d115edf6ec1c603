"""
API error types and the project-wide DRF exception handler.

Every failure leaves the API as ``{"ok": false, "code", "message", "data": null}``
where ``code`` repeats the HTTP status.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class SubjectNotFound(NotFound):
    """The mother referenced by a request does not exist."""
    default_detail = 'Mother not found'
    default_code = 'subject_not_found'


class PredictorError(APIException):
    """Base class for failures of the external risk predictor."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Predict API error'
    default_code = 'predictor_error'


class PredictorUnavailable(PredictorError):
    """The predictor could not be reached (connection error, timeout)."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Predict API unavailable'
    default_code = 'predictor_unavailable'


class PredictorRejected(PredictorError):
    """The predictor answered but with an HTTP or application error code, or no body."""
    default_code = 'predictor_rejected'

    def __init__(self, http_status=None, app_code=None, detail=None):
        self.http_status = http_status
        self.app_code = app_code
        if detail is None:
            shown = 'undefined' if app_code is None else app_code
            detail = f'Predict API error: HTTP {http_status}, code {shown}'
        super().__init__(detail)


class PersistenceFailure(APIException):
    """Writing a medical record failed after a prediction was obtained."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Medical record could not be saved'
    default_code = 'persistence_failure'


def _message_from(data):
    if isinstance(data, dict):
        if 'detail' in data:
            return _message_from(data['detail'])
        # serializer errors: "field: first message"
        parts = []
        for field, errors in data.items():
            first = errors[0] if isinstance(errors, list) and errors else errors
            parts.append(f'{field}: {first}')
        return '; '.join(parts)
    if isinstance(data, list):
        return '; '.join(str(x) for x in data)
    return str(data)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled error in %s', context.get('view'))
        return Response(
            {'ok': False, 'code': 500, 'message': str(exc), 'data': None},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if resp.status_code >= 500:
        logger.error('API error %s: %s', resp.status_code, exc)
    body = {'ok': False, 'code': resp.status_code, 'message': _message_from(resp.data), 'data': None}
    if isinstance(resp.data, dict) and set(resp.data) != {'detail'}:
        body['errors'] = resp.data
    return Response(body, status=resp.status_code, headers=_passthrough_headers(resp))


def _passthrough_headers(resp):
    return {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
