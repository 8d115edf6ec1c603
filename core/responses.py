from rest_framework.response import Response


def ok(data=None, message: str = 'OK', status: int = 200, headers=None) -> Response:
    """Success envelope; errors get the same shape from ``core.exceptions``."""
    return Response({'ok': True, 'code': status, 'message': message, 'data': data},
                    status=status, headers=headers)
