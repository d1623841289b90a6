from django.contrib import admin

from .models import Doc, DocItem, NavHeader


class NavHeaderInline(admin.TabularInline):
    model = NavHeader
    fk_name = 'doc'
    extra = 0
    fields = ('label', 'slug', 'position', 'icon', 'doc_item', 'parent')


@admin.register(Doc)
class DocAdmin(admin.ModelAdmin):
    list_display = ('title', 'slug', 'user', 'is_public', 'updated_at')
    list_filter = ('is_public',)
    search_fields = ('title', 'slug', 'user__username')
    readonly_fields = ('id', 'created_at', 'updated_at')
    inlines = [NavHeaderInline]


@admin.register(NavHeader)
class NavHeaderAdmin(admin.ModelAdmin):
    list_display = ('label', 'slug', 'doc', 'doc_item', 'parent', 'position')
    search_fields = ('label', 'slug', 'doc__title')
    list_select_related = ('doc', 'doc_item', 'parent')


@admin.register(DocItem)
class DocItemAdmin(admin.ModelAdmin):
    list_display = ('label', 'slug', 'nav_header', 'position', 'is_default')
    list_filter = ('is_default',)
    search_fields = ('label', 'slug')
