from rest_framework import serializers

from documentation.serializers import NavHeaderSerializer, OwnerSerializer

from .models import Page, PageRevision


class PageListSerializer(serializers.ModelSerializer):
    doc_id = serializers.UUIDField(read_only=True)
    doc_item_id = serializers.UUIDField(read_only=True)
    nav_header_id = serializers.UUIDField(read_only=True)
    parent_id = serializers.UUIDField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Page
        fields = [
            'id', 'doc_id', 'doc_item_id', 'nav_header_id', 'parent_id', 'user_id',
            'title', 'slug', 'summary', 'status', 'position', 'view_count',
            'published_at', 'last_edited_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PageSerializer(PageListSerializer):
    """Страница целиком: контент, SEO-поля, раздел и дочерние страницы."""

    nav_header = NavHeaderSerializer(read_only=True)
    children = serializers.SerializerMethodField()

    class Meta(PageListSerializer.Meta):
        fields = PageListSerializer.Meta.fields + [
            'content', 'draft_content', 'author', 'tags', 'meta_title',
            'meta_description', 'nav_header', 'children',
        ]
        read_only_fields = fields

    def get_children(self, obj):
        children = obj.children.all()
        if self.context.get('published_only'):
            children = children.filter(status=Page.Status.PUBLISHED)
        return PageListSerializer(children.order_by('position', 'created_at'), many=True).data


class PageWriteSerializer(serializers.Serializer):
    """Поля, которые принимают создание и обновление страницы."""

    title = serializers.CharField(max_length=300, required=False)
    slug = serializers.CharField(required=False, allow_blank=True)
    content = serializers.CharField(required=False, allow_blank=True)
    draft_content = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    summary = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.CharField(required=False, allow_blank=True)
    position = serializers.IntegerField(required=False)
    doc_id = serializers.UUIDField(required=False)
    doc_item_id = serializers.UUIDField(required=False, allow_null=True)
    nav_header_id = serializers.UUIDField(required=False, allow_null=True)
    parent_id = serializers.UUIDField(required=False, allow_null=True)
    author = serializers.CharField(required=False, allow_blank=True)
    tags = serializers.ListField(child=serializers.CharField(), required=False)
    meta_title = serializers.CharField(required=False, allow_blank=True)
    meta_description = serializers.CharField(required=False, allow_blank=True)


class PageRevisionSerializer(serializers.ModelSerializer):
    page_id = serializers.UUIDField(read_only=True)
    user = OwnerSerializer(read_only=True)

    class Meta:
        model = PageRevision
        fields = ['id', 'page_id', 'user', 'snapshot', 'change_log', 'created_at']
        read_only_fields = fields


class NavHeaderBriefSerializer(serializers.Serializer):
    label = serializers.CharField()
    slug = serializers.CharField()


class ExternalPageSerializer(serializers.ModelSerializer):
    """Страница во внешнем API /api/v1/: видимость берётся из документации."""

    doc_id = serializers.UUIDField(read_only=True)
    is_public = serializers.BooleanField(source='doc.is_public', read_only=True)
    nav_header = NavHeaderBriefSerializer(read_only=True)

    class Meta:
        model = Page
        fields = [
            'id', 'doc_id', 'title', 'slug', 'summary', 'status', 'view_count',
            'is_public', 'nav_header', 'published_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class RevisionBriefSerializer(serializers.ModelSerializer):
    user = OwnerSerializer(read_only=True)

    class Meta:
        model = PageRevision
        fields = ['id', 'created_at', 'user']
        read_only_fields = fields


class ExternalPageDetailSerializer(ExternalPageSerializer):
    user = OwnerSerializer(read_only=True)
    revisions = serializers.SerializerMethodField()

    class Meta(ExternalPageSerializer.Meta):
        fields = ExternalPageSerializer.Meta.fields + ['content', 'user', 'revisions']
        read_only_fields = fields

    def get_revisions(self, obj):
        revisions = obj.revisions.select_related('user').order_by('-created_at')[:10]
        return RevisionBriefSerializer(revisions, many=True).data
