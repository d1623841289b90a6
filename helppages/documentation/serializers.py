from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Doc, DocItem, NavHeader
from .slugs import normalize_slug

User = get_user_model()

DUPLICATE_DOC_SLUG = 'A documentation with this slug already exists'


class OwnerSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'full_name']
        read_only_fields = fields


class DocSerializer(serializers.ModelSerializer):
    user = OwnerSerializer(read_only=True)
    pages_count = serializers.SerializerMethodField()

    class Meta:
        model = Doc
        fields = [
            'id', 'title', 'slug', 'description', 'is_public', 'theme',
            'user', 'pages_count', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'user', 'pages_count', 'created_at', 'updated_at']

    def get_pages_count(self, obj):
        count = getattr(obj, 'pages_count', None)
        if count is None:
            count = obj.pages.count()
        return count


class DocWriteSerializer(serializers.ModelSerializer):
    """
    Создание / изменение документации.

    slug нормализуется из slug или title и проверяется на уникальность.
    """

    slug = serializers.CharField(required=False, allow_blank=True)
    title = serializers.CharField(max_length=200)

    class Meta:
        model = Doc
        fields = ['title', 'slug', 'description', 'is_public', 'theme']
        extra_kwargs = {
            'description': {'required': False, 'allow_blank': True},
            'is_public': {'required': False},
            'theme': {'required': False},
        }

    def validate(self, attrs):
        if self.instance is None or 'slug' in attrs:
            title = attrs.get('title') or (self.instance.title if self.instance else '')
            slug = normalize_slug(attrs.get('slug'), title)
            duplicates = Doc.objects.filter(slug=slug)
            if self.instance is not None:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise serializers.ValidationError({'slug': DUPLICATE_DOC_SLUG})
            attrs['slug'] = slug
        return attrs


class NavHeaderSerializer(serializers.ModelSerializer):
    doc_id = serializers.UUIDField(read_only=True)
    doc_item_id = serializers.UUIDField(read_only=True)
    parent_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = NavHeader
        fields = [
            'id', 'doc_id', 'doc_item_id', 'parent_id', 'label', 'slug',
            'position', 'icon', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class NavHeaderWriteSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=200)
    slug = serializers.CharField(required=False, allow_blank=True)
    position = serializers.IntegerField(required=False, default=0)
    icon = serializers.CharField(required=False, allow_blank=True, default='')
    doc_item_id = serializers.UUIDField(required=False, allow_null=True)
    parent_id = serializers.UUIDField(required=False, allow_null=True)


class DocItemSerializer(serializers.ModelSerializer):
    nav_header_id = serializers.UUIDField(read_only=True)
    pages_count = serializers.SerializerMethodField()
    sections_count = serializers.SerializerMethodField()

    class Meta:
        model = DocItem
        fields = [
            'id', 'nav_header_id', 'label', 'slug', 'description', 'position',
            'is_default', 'pages_count', 'sections_count', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_pages_count(self, obj):
        count = getattr(obj, 'pages_count', None)
        return obj.pages.count() if count is None else count

    def get_sections_count(self, obj):
        count = getattr(obj, 'sections_count', None)
        return obj.nav_headers.count() if count is None else count


class DocItemWriteSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=200)
    slug = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    position = serializers.IntegerField(required=False, allow_null=True)
    is_default = serializers.BooleanField(required=False)
