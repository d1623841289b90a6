"""
Внешний API страниц: /api/v1/pages/

Аутентификация по заголовку X-API-Key (accounts.ApiKey), либо
JWT / сессия для запросов из кабинета. Без учётных данных — 401.
"""
import logging

from rest_framework import status
from rest_framework.authentication import SessionAuthentication
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.authentication import JWTAuthentication

from accounts import roles
from accounts.authentication import ApiKeyAuthentication
from documentation import policy
from documentation.lookups import get_doc_or_404, parse_uuid
from documentation.slugs import normalize_slug

from .models import Page
from .serializers import ExternalPageDetailSerializer, ExternalPageSerializer
from .services import create_page, update_page

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


def _int_param(request, name, default):
    value = request.query_params.get(name)
    if value in (None, ''):
        return default
    try:
        number = int(value)
    except ValueError:
        raise ValidationError({name: f'{name} must be an integer'})
    if number < 0:
        raise ValidationError({name: f'{name} must not be negative'})
    return number


class ExternalApiView(APIView):
    # ApiKeyAuthentication первым: его authenticate_header даёт 401 вместо 403
    authentication_classes = [ApiKeyAuthentication, JWTAuthentication, SessionAuthentication]
    permission_classes = [IsAuthenticated]


class ExternalPageListCreateView(ExternalApiView):
    """
    GET  — свои страницы: ?limit=50&offset=0&status=&is_public=
    POST — новая страница, status=published допускается сразу
    """

    def get(self, request):
        limit = _int_param(request, 'limit', DEFAULT_LIMIT)
        offset = _int_param(request, 'offset', 0)

        pages = Page.objects.filter(user=request.user).select_related('doc', 'nav_header')
        page_status = request.query_params.get('status')
        if page_status:
            pages = pages.filter(status=page_status)
        is_public = request.query_params.get('is_public')
        if is_public is not None:
            pages = pages.filter(doc__is_public=is_public.lower() == 'true')

        total = pages.count()
        window = pages.order_by('-updated_at')[offset:offset + limit]
        return Response({
            'pages': ExternalPageSerializer(window, many=True).data,
            'pagination': {
                'total': total,
                'limit': limit,
                'offset': offset,
                'has_more': offset + limit < total,
            },
        })

    def post(self, request):
        if roles.has_role(request.user, roles.VIEWER):
            raise PermissionDenied('Forbidden: Viewers cannot create pages')

        data = request.data
        if not data.get('title') or not data.get('slug') or not data.get('content'):
            raise ValidationError({'error': 'Missing required fields: title, slug, content'})
        if not data.get('doc_id'):
            raise ValidationError({'error': 'Missing required field: doc_id'})

        doc = get_doc_or_404(data['doc_id'])
        if not policy.can_manage_doc(request.user, doc):
            raise PermissionDenied('Forbidden: Cannot create pages in this documentation')

        slug = normalize_slug(data['slug'], data['title'])
        if Page.objects.filter(doc=doc, slug=slug).exists():
            return Response(
                {'error': 'A page with this slug already exists in this documentation'},
                status=status.HTTP_409_CONFLICT,
            )

        page = create_page(request.user, data, allow_publish=True)
        logger.info('Page %s created via external API by %s', page.pk, request.user.username)
        return Response(
            {'message': 'Page created successfully', 'page': ExternalPageSerializer(page).data},
            status=status.HTTP_201_CREATED,
        )


class ExternalPageDetailView(ExternalApiView):
    """
    GET    — страница и 10 последних ревизий
    PATCH  — автор, admin или editor; ревизия снимается всегда
    DELETE — только admin
    """

    def _get_page(self, pk):
        return get_object_or_404(Page.objects.select_related('doc', 'user', 'nav_header'), pk=parse_uuid(pk))

    def get(self, request, pk):
        page = self._get_page(pk)
        if not page.is_published and not policy.is_author_or_collaborator(request.user, page):
            raise PermissionDenied('Forbidden: Cannot access this page')
        return Response({'page': ExternalPageDetailSerializer(page).data})

    def patch(self, request, pk):
        page = self._get_page(pk)
        if roles.has_role(request.user, roles.VIEWER) or not policy.is_author_or_collaborator(request.user, page):
            raise PermissionDenied('Forbidden: Cannot edit this page')

        page, _ = update_page(request.user, page, request.data, force_snapshot=True)
        return Response({
            'message': 'Page updated successfully',
            'page': ExternalPageSerializer(page).data,
        })

    def delete(self, request, pk):
        page = self._get_page(pk)
        if not roles.has_role(request.user, roles.ADMIN):
            raise PermissionDenied('Forbidden: Only admins can delete pages')
        logger.info('Page %s deleted via external API by %s', page.pk, request.user.username)
        page.delete()
        return Response({'message': 'Page deleted successfully'})
