from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import DocItemViewSet, DocViewSet, NavHeaderViewSet

router = DefaultRouter()
router.register(r'docs', DocViewSet, basename='doc')
router.register(r'nav-headers', NavHeaderViewSet, basename='nav-header')
router.register(r'doc-items', DocItemViewSet, basename='doc-item')

urlpatterns = [
    path('', include(router.urls)),
]
