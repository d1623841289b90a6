import logging

from django.db.models import Count, Max, Q
from rest_framework import status, viewsets
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from . import policy
from .lookups import get_doc_or_404, parse_uuid
from .models import Doc, DocItem, NavHeader
from .permissions import CanManageDoc
from .serializers import (
    DocItemSerializer,
    DocItemWriteSerializer,
    DocSerializer,
    DocWriteSerializer,
    NavHeaderSerializer,
    NavHeaderWriteSerializer,
)
from .slugs import normalize_slug
from .tree import build_doc_item_sections, build_doc_tree, build_dropdowns

logger = logging.getLogger(__name__)


class DocViewSet(viewsets.ModelViewSet):
    """
    /api/docs/

    list     — admin/editor видят все документации, остальные только свои
    retrieve — по id или slug (?by=id|slug), публичные доступны без входа
    update   — владелец, admin или editor
    destroy  — владелец или admin
    """
    serializer_class = DocSerializer
    permission_classes = [IsAuthenticated, CanManageDoc]
    lookup_value_regex = '[^/]+'

    def get_permissions(self):
        if self.action == 'retrieve':
            return [AllowAny()]
        return super().get_permissions()

    def get_queryset(self):
        qs = Doc.objects.select_related('user').annotate(pages_count=Count('pages'))
        if self.action == 'list' and not policy.is_collaborator(self.request.user):
            qs = qs.filter(user=self.request.user)
        return qs.order_by('-updated_at')

    def get_object(self):
        lookup = self.kwargs[self.lookup_field]
        by = self.request.query_params.get('by')
        qs = self.get_queryset()

        if by == 'slug':
            doc = qs.filter(slug=lookup).first()
        elif by == 'id' or parse_uuid(lookup) is not None:
            parsed = parse_uuid(lookup)
            doc = qs.filter(pk=parsed).first() if parsed else None
        else:
            doc = qs.filter(slug=lookup).first()

        if doc is None:
            raise NotFound('Documentation not found')
        self.check_object_permissions(self.request, doc)
        return doc

    def retrieve(self, request, *args, **kwargs):
        doc = self.get_object()
        can_manage = policy.can_manage_doc(request.user, doc)
        if not doc.is_public and not can_manage:
            raise PermissionDenied('Forbidden: This documentation is private')

        # Режим кабинета (?by=id) показывает черновики тем, кто может редактировать
        include_drafts = request.query_params.get('by') == 'id' and can_manage
        return Response(build_doc_tree(doc, include_drafts=include_drafts))

    def create(self, request, *args, **kwargs):
        serializer = DocWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        doc = serializer.save(user=request.user)
        logger.info('Doc created: %s by %s', doc.slug, request.user.username)
        return Response(DocSerializer(doc).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        doc = self.get_object()
        serializer = DocWriteSerializer(doc, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        doc = serializer.save()
        return Response(DocSerializer(doc).data)

    def destroy(self, request, *args, **kwargs):
        doc = self.get_object()
        logger.info('Doc deleted: %s by %s', doc.slug, request.user.username)
        doc.delete()
        return Response({'message': 'Documentation deleted successfully'})


class NavHeaderViewSet(viewsets.ModelViewSet):
    """
    /api/nav-headers/

    GET ?doc_id=&doc_item_id= — разделы пункта меню
    GET ?doc_id=              — верхнеуровневые меню с пунктами
    """
    serializer_class = NavHeaderSerializer
    permission_classes = [IsAuthenticated, CanManageDoc]
    queryset = NavHeader.objects.select_related('doc')

    def list(self, request, *args, **kwargs):
        doc_id = request.query_params.get('doc_id')
        if not doc_id:
            raise ValidationError({'doc_id': 'doc_id is required'})

        parsed = parse_uuid(doc_id)
        doc = Doc.objects.filter(pk=parsed).first() if parsed else None
        # Несуществующая документация неотличима от чужой
        if doc is None or not policy.can_manage_doc(request.user, doc):
            raise PermissionDenied('Forbidden')

        doc_item_id = request.query_params.get('doc_item_id')
        if doc_item_id:
            doc_item = get_object_or_404(DocItem, pk=parse_uuid(doc_item_id), nav_header__doc=doc)
            return Response(build_doc_item_sections(doc, doc_item))

        return Response(build_dropdowns(doc))

    def create(self, request, *args, **kwargs):
        doc_id = request.data.get('doc_id')
        if not doc_id or not request.data.get('label'):
            raise ValidationError({'error': 'label and doc_id are required'})
        doc = get_doc_or_404(doc_id)
        if not policy.can_manage_doc(request.user, doc):
            raise PermissionDenied('Forbidden')

        serializer = NavHeaderWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        doc_item = None
        if data.get('doc_item_id'):
            doc_item = get_object_or_404(DocItem, pk=data['doc_item_id'], nav_header__doc=doc)
        parent = None
        if data.get('parent_id'):
            parent = get_object_or_404(NavHeader, pk=data['parent_id'], doc=doc)

        nav_header = NavHeader.objects.create(
            doc=doc,
            doc_item=doc_item,
            parent=parent,
            label=data['label'],
            slug=normalize_slug(data.get('slug'), data['label']),
            position=data.get('position', 0),
            icon=data.get('icon', ''),
        )
        return Response(NavHeaderSerializer(nav_header).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        nav_header = self.get_object()
        serializer = NavHeaderWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if 'label' in data:
            nav_header.label = data['label']
        if 'slug' in data:
            nav_header.slug = normalize_slug(data['slug'], nav_header.label)
        if 'icon' in data:
            nav_header.icon = data['icon']
        if 'position' in data:
            nav_header.position = data['position']
        nav_header.save()
        return Response(NavHeaderSerializer(nav_header).data)

    def destroy(self, request, *args, **kwargs):
        nav_header = self.get_object()
        nav_header.delete()
        return Response({'message': 'Section deleted successfully'})


class DocItemViewSet(viewsets.ModelViewSet):
    """
    /api/doc-items/

    slug уникален в пределах раздела, is_default — не больше одного на раздел.
    """
    serializer_class = DocItemSerializer
    permission_classes = [IsAuthenticated, CanManageDoc]
    queryset = DocItem.objects.select_related('nav_header__doc').annotate(
        pages_count=Count('pages', distinct=True),
        sections_count=Count('nav_headers', distinct=True),
    )

    def list(self, request, *args, **kwargs):
        nav_header_id = request.query_params.get('nav_header_id')
        if not nav_header_id:
            raise ValidationError({'nav_header_id': 'nav_header_id is required'})
        nav_header = get_object_or_404(NavHeader.objects.select_related('doc'), pk=parse_uuid(nav_header_id))
        if not policy.can_manage_doc(request.user, nav_header.doc):
            raise PermissionDenied('Forbidden')

        items = self.get_queryset().filter(nav_header=nav_header).order_by('position', 'created_at')
        return Response(DocItemSerializer(items, many=True).data)

    def create(self, request, *args, **kwargs):
        nav_header_id = request.data.get('nav_header_id')
        if not nav_header_id or not request.data.get('label'):
            raise ValidationError({'error': 'nav_header_id and label are required'})
        nav_header = get_object_or_404(NavHeader.objects.select_related('doc'), pk=parse_uuid(nav_header_id))
        if not policy.can_manage_doc(request.user, nav_header.doc):
            raise PermissionDenied('Forbidden')

        serializer = DocItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        slug = normalize_slug(data.get('slug'), data['label'])
        self._check_slug(nav_header, slug)

        position = data.get('position')
        if position is None:
            max_position = nav_header.doc_items.aggregate(max_position=Max('position'))['max_position']
            position = 0 if max_position is None else max_position + 1

        is_default = data.get('is_default', False)
        if is_default:
            nav_header.doc_items.filter(is_default=True).update(is_default=False)

        doc_item = DocItem.objects.create(
            nav_header=nav_header,
            label=data['label'],
            slug=slug,
            description=data.get('description', ''),
            position=position,
            is_default=is_default,
        )
        return Response(DocItemSerializer(doc_item).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        doc_item = self.get_object()
        serializer = DocItemWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if 'label' in data:
            doc_item.label = data['label']
        if 'slug' in data:
            slug = normalize_slug(data['slug'], doc_item.label)
            self._check_slug(doc_item.nav_header, slug, exclude=doc_item)
            doc_item.slug = slug
        if 'description' in data:
            doc_item.description = data['description']
        if data.get('position') is not None:
            doc_item.position = data['position']
        if 'is_default' in data:
            if data['is_default']:
                DocItem.objects.filter(
                    nav_header=doc_item.nav_header, is_default=True
                ).exclude(pk=doc_item.pk).update(is_default=False)
            doc_item.is_default = data['is_default']
        doc_item.save()
        return Response(DocItemSerializer(self.get_queryset().get(pk=doc_item.pk)).data)

    def destroy(self, request, *args, **kwargs):
        doc_item = self.get_object()
        doc_item.delete()
        return Response({'message': 'Doc item deleted successfully'})

    @staticmethod
    def _check_slug(nav_header, slug, exclude=None):
        duplicates = DocItem.objects.filter(Q(nav_header=nav_header) & Q(slug=slug))
        if exclude is not None:
            duplicates = duplicates.exclude(pk=exclude.pk)
        if duplicates.exists():
            raise ValidationError({'slug': 'A doc item with this slug already exists in this section'})
