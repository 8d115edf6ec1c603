"""
Authentication endpoints: register, login, token refresh, logout and the
current user.
"""
from __future__ import annotations

import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from core.responses import ok
from core.serializers.auth import LoginSerializer, LogoutSerializer, RegisterSerializer
from core.services import accounts
from core.services.audit import try_log_action

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = accounts.register_user(
        email=v['email'],
        password=v['password'],
        role=v['role'],
        first_name=v.get('firstName', ''),
        last_name=v.get('lastName', ''),
        profile=s.profile_fields(),
    )
    return ok(accounts.format_user_with_profile(user), message='User registered', status=201)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    payload = accounts.login(request, identifier=s.validated_data['identifier'],
                             password=s.validated_data['password'])
    return ok(payload, message='Login successful')

# ScopedRateThrottle reads throttle_scope from the wrapped view class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    """Exchange a refresh token for a new access token."""
    token = (request.data.get('refresh') or '').strip()
    if not token:
        raise ValidationError({'refresh': ['This field is required.']})
    try:
        refresh = RefreshToken(token)
    except TokenError as exc:
        raise ValidationError({'detail': str(exc)})
    return ok({'access': str(refresh.access_token)}, message='Token refreshed')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as exc:
            raise ValidationError({'detail': str(exc)})
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    try_log_action(user=request.user, action='logout', object_type='user',
                   object_id=request.user.id, detail={'blacklisted': count})
    return ok({'blacklisted': count}, message='Logged out')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return ok(accounts.format_user_with_profile(request.user))
