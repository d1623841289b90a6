from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .api_views import (
    ApiKeyDetailView,
    ApiKeyListCreateView,
    ProfileView,
    UserDetailView,
    UserListCreateView,
)
from .jwt_views import AutoLoginView, HelpPagesTokenObtainPairView, SignupView

urlpatterns = [
    # Аутентификация
    path('auth/signup/', SignupView.as_view(), name='signup'),
    path('auth/token/', HelpPagesTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/auto-login/', AutoLoginView.as_view(), name='auto-login'),
    path('auth/profile/', ProfileView.as_view(), name='profile'),

    # Пользователи (админка)
    path('users/', UserListCreateView.as_view(), name='user-list'),
    path('users/<int:pk>/', UserDetailView.as_view(), name='user-detail'),

    # API-ключи
    path('api-keys/', ApiKeyListCreateView.as_view(), name='api-key-list'),
    path('api-keys/<int:pk>/', ApiKeyDetailView.as_view(), name='api-key-detail'),
]
