import logging

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from documentation import policy
from documentation.lookups import get_doc_or_404, parse_uuid
from documentation.permissions import CanEditPage
from documentation.serializers import NavHeaderSerializer

from .export import export_filename, export_html, export_markdown
from .models import Page
from .serializers import PageListSerializer, PageRevisionSerializer, PageSerializer
from .services import create_page, is_autosave_request, restore_revision, update_page

logger = logging.getLogger(__name__)


class PageViewSet(viewsets.ModelViewSet):
    """
    /api/pages/

    list     — ?doc_id= обязателен, фильтры nav_header_id и status
    retrieve — страница с дочерними и разделом
    update   — обычное сохранение или автосейв (X-Autosave: true)
    destroy  — владелец документации или admin
    """
    serializer_class = PageSerializer
    permission_classes = [IsAuthenticated, CanEditPage]
    queryset = Page.objects.select_related('doc', 'nav_header', 'user')

    def list(self, request, *args, **kwargs):
        doc_id = request.query_params.get('doc_id')
        if not doc_id:
            raise ValidationError({'doc_id': 'doc_id is required'})
        doc = get_doc_or_404(doc_id)
        if not policy.can_manage_doc(request.user, doc):
            raise PermissionDenied('Forbidden')

        pages = Page.objects.filter(doc=doc)
        nav_header_id = request.query_params.get('nav_header_id')
        if nav_header_id:
            pages = pages.filter(nav_header_id=parse_uuid(nav_header_id))
        page_status = request.query_params.get('status')
        if page_status:
            pages = pages.filter(status=page_status)
        pages = pages.order_by('position', 'created_at')
        return Response(PageListSerializer(pages, many=True).data)

    def create(self, request, *args, **kwargs):
        page = create_page(request.user, request.data)
        return Response(PageSerializer(page).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        page = self.get_object()
        is_autosave = is_autosave_request(request)
        page, updated_fields = update_page(request.user, page, request.data, is_autosave=is_autosave)
        data = PageSerializer(page).data
        if not updated_fields and not is_autosave:
            return Response({'error': 'No fields provided for update', 'page': data})
        return Response(data)

    def destroy(self, request, *args, **kwargs):
        page = self.get_object()
        logger.info('Page %s deleted by %s', page.pk, request.user.username)
        page.delete()
        return Response({'message': 'Page deleted successfully'})

    @action(detail=True, methods=['get'])
    def revisions(self, request, pk=None):
        page = get_object_or_404(Page, pk=pk)
        if not policy.can_view_revisions(request.user, page):
            raise PermissionDenied('Forbidden')
        revisions = page.revisions.select_related('user').order_by('-created_at')
        revisions = revisions[:settings.PAGE_REVISIONS_LIMIT]
        return Response(PageRevisionSerializer(revisions, many=True).data)

    @action(detail=True, methods=['post'])
    def restore(self, request, pk=None):
        page = get_object_or_404(Page.objects.select_related('doc'), pk=pk)
        page = restore_revision(request.user, page, request.data.get('revision_id'))
        return Response({'message': 'Page restored successfully', 'page': PageSerializer(page).data})

    @action(detail=False, methods=['get'], permission_classes=[AllowAny], url_path='public')
    def public(self, request):
        """Опубликованные страницы публичных документаций, сгруппированные по разделам."""
        pages = (
            Page.objects.filter(status=Page.Status.PUBLISHED, doc__is_public=True)
            .select_related('nav_header')
            .order_by('nav_header__position', 'nav_header_id', 'position', 'title')
        )
        grouped = {}
        for page in pages:
            key = str(page.nav_header_id) if page.nav_header_id else 'none'
            if key not in grouped:
                grouped[key] = {
                    'header': NavHeaderSerializer(page.nav_header).data if page.nav_header else None,
                    'pages': [],
                }
            grouped[key]['pages'].append(PageListSerializer(page).data)
        return Response(grouped)


class ExportView(APIView):
    """
    GET /api/export/?format=markdown|html|pdf&page_id=

    Черновики экспортирует только тот, кто может их редактировать.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        export_format = request.query_params.get('format', 'markdown')
        page_id = request.query_params.get('page_id')
        if not page_id:
            raise ValidationError({'page_id': 'page_id is required'})

        page = get_object_or_404(Page.objects.select_related('doc', 'user', 'nav_header'), pk=parse_uuid(page_id))

        if not page.is_published or not page.doc.is_public:
            if not request.user or not request.user.is_authenticated:
                raise NotAuthenticated('Authentication required')
            if not policy.can_edit_page(request.user, page):
                raise PermissionDenied('Forbidden')

        if export_format == 'markdown':
            response = HttpResponse(export_markdown(page), content_type='text/markdown; charset=utf-8')
            response['Content-Disposition'] = f'attachment; filename="{export_filename(page, "md")}"'
            return response
        if export_format == 'html':
            response = HttpResponse(export_html(page), content_type='text/html; charset=utf-8')
            response['Content-Disposition'] = f'attachment; filename="{export_filename(page, "html")}"'
            return response
        if export_format == 'pdf':
            return Response(
                {'error': 'PDF export is not implemented yet. Use markdown or html.'},
                status=status.HTTP_501_NOT_IMPLEMENTED,
            )
        raise ValidationError({'format': 'Invalid format. Use markdown, html or pdf'})
