from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api_v1 import ExternalPageDetailView, ExternalPageListCreateView
from .views import ExportView, PageViewSet

router = DefaultRouter()
router.register(r'pages', PageViewSet, basename='page')

urlpatterns = [
    path('export/', ExportView.as_view(), name='page-export'),

    # Внешний API (X-API-Key)
    path('v1/pages/', ExternalPageListCreateView.as_view(), name='v1-page-list'),
    path('v1/pages/<str:pk>/', ExternalPageDetailView.as_view(), name='v1-page-detail'),

    path('', include(router.urls)),
]
