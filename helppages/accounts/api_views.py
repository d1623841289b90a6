import logging

from django.contrib.auth import get_user_model
from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import roles
from .models import ApiKey
from .permissions import IsAdmin, IsSelfOrAdmin
from .serializers import (
    ApiKeySerializer,
    ProfileSerializer,
    UserCreateSerializer,
    UserListSerializer,
    UserSerializer,
    UserUpdateSerializer,
)

logger = logging.getLogger(__name__)
User = get_user_model()

ADMIN_ONLY_USER_FIELDS = ('role', 'email', 'username')


class ProfileView(APIView):
    """Профиль текущего пользователя с матрицей прав"""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(ProfileSerializer(request.user).data)


class UserListCreateView(APIView):
    """
    GET  /api/users/ — все пользователи с количеством страниц и документаций
    POST /api/users/ — создание пользователя админом
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        users = User.objects.annotate(
            pages_count=Count('pages', distinct=True),
            docs_count=Count('docs', distinct=True),
        ).order_by('-created_at')
        return Response(UserListSerializer(users, many=True).data)

    def post(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save(created_by=request.user)
        logger.info('User %s created by admin %s', user.username, request.user.username)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(APIView):
    permission_classes = [IsSelfOrAdmin]

    def get_object(self, pk):
        user = get_object_or_404(User, pk=pk)
        self.check_object_permissions(self.request, user)
        return user

    def get(self, request, pk):
        return Response(UserSerializer(self.get_object(pk)).data)

    def put(self, request, pk):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk):
        return self._update(request, pk, partial=True)

    def _update(self, request, pk, partial):
        user = self.get_object(pk)
        if not roles.has_role(request.user, roles.ADMIN):
            forbidden = [field for field in ADMIN_ONLY_USER_FIELDS if field in request.data]
            if forbidden:
                raise PermissionDenied(f'Only admins can change: {", ".join(forbidden)}')

        # PUT тоже частичный: фронтенд шлёт только изменённые поля
        serializer = UserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data)

    def delete(self, request, pk):
        roles.require_role(request.user, roles.ADMIN)
        user = get_object_or_404(User, pk=pk)
        if user.pk == request.user.pk:
            return Response({'error': 'Cannot delete your own account'},
                            status=status.HTTP_400_BAD_REQUEST)
        logger.info('User %s deleted by admin %s', user.username, request.user.username)
        user.delete()
        return Response({'message': 'User deleted successfully'})


class ApiKeyListCreateView(APIView):
    """Свои API-ключи. Полный ключ показывается только в ответе на создание."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        keys = ApiKey.objects.filter(user=request.user)
        return Response(ApiKeySerializer(keys, many=True).data)

    def post(self, request):
        serializer = ApiKeySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        api_key = serializer.save(user=request.user)
        data = ApiKeySerializer(api_key).data
        data['key'] = api_key.key
        return Response(data, status=status.HTTP_201_CREATED)


class ApiKeyDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        api_key = get_object_or_404(ApiKey, pk=pk, user=request.user)
        api_key.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
