"""
Регистрация, выдача JWT и одноразовый автологин.

Автологин нужен для перехода после регистрации на субдомен
пользователя: cookie основного домена туда не доезжают, поэтому
выдаём короткоживущий одноразовый токен, который субдомен меняет на JWT.
"""
import logging
import secrets

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.core.cache import cache
from django.db import transaction
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from tenants.subdomains import subdomain_url

from . import roles
from .serializers import HelpPagesTokenObtainPairSerializer, SignupSerializer

logger = logging.getLogger(__name__)
User = get_user_model()

AUTO_LOGIN_CACHE_PREFIX = 'auto_login:'


def issue_token_pair(user):
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    refresh['username'] = user.username
    return {'access': str(refresh.access_token), 'refresh': str(refresh)}


class HelpPagesTokenObtainPairView(TokenObtainPairView):
    serializer_class = HelpPagesTokenObtainPairSerializer


class SignupView(APIView):
    """
    POST /api/auth/signup/

    Первый зарегистрированный пользователь становится admin,
    остальные получают SIGNUP_DEFAULT_ROLE.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            is_first_user = not User.objects.exists()
            role = roles.ADMIN if is_first_user else settings.SIGNUP_DEFAULT_ROLE
            user = User.objects.create_user(
                data['email'],
                data['password'],
                username=data['username'],
                full_name=data.get('full_name', ''),
                role=role,
            )

        logger.info('User signed up: %s (role=%s)', user.username, user.role)
        return Response(
            {'user': {'id': user.id, 'email': user.email, 'username': user.username}},
            status=status.HTTP_201_CREATED,
        )


class AutoLoginView(APIView):
    """
    POST /api/auth/auto-login/  {email, password} → {token, redirect_url}
    GET  /api/auth/auto-login/?token=...           → JWT пара (токен одноразовый)
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        email = (request.data.get('email') or '').strip()
        password = request.data.get('password') or ''
        if not email or not password:
            return Response({'error': 'Email and password are required'},
                            status=status.HTTP_400_BAD_REQUEST)

        existing = User.objects.filter(email__iexact=email).first()
        user = authenticate(request, email=existing.email if existing else email, password=password)
        if user is None:
            return Response({'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)

        token = secrets.token_urlsafe(32)
        cache.set(f'{AUTO_LOGIN_CACHE_PREFIX}{token}', user.pk, timeout=settings.AUTO_LOGIN_TOKEN_TTL)
        logger.info('Auto-login token issued for %s', user.username)

        return Response({
            'token': token,
            'expires_in': settings.AUTO_LOGIN_TOKEN_TTL,
            'redirect_url': subdomain_url(user.username, f'/auth/auto-login?token={token}'),
        })

    def get(self, request):
        token = request.query_params.get('token', '').strip()
        if not token:
            return Response({'error': 'Token is required'}, status=status.HTTP_400_BAD_REQUEST)

        cache_key = f'{AUTO_LOGIN_CACHE_PREFIX}{token}'
        user_id = cache.get(cache_key)
        # Одноразовый: удаляем сразу, даже если пользователь уже не найдётся
        cache.delete(cache_key)
        if user_id is None:
            return Response({'error': 'Invalid or expired token'}, status=status.HTTP_401_UNAUTHORIZED)

        user = User.objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            return Response({'error': 'Invalid or expired token'}, status=status.HTTP_401_UNAUTHORIZED)

        return Response({**issue_token_pair(user), 'username': user.username})
