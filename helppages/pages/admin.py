from django.contrib import admin

from .models import Page, PageRevision


class PageRevisionInline(admin.TabularInline):
    model = PageRevision
    extra = 0
    fields = ('created_at', 'user', 'change_log')
    readonly_fields = fields
    can_delete = False


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    list_display = ('title', 'slug', 'doc', 'status', 'view_count', 'updated_at')
    list_filter = ('status', 'doc__is_public')
    search_fields = ('title', 'slug', 'doc__title', 'user__username')
    readonly_fields = ('id', 'search_index', 'view_count', 'created_at', 'updated_at')
    list_select_related = ('doc',)
    inlines = [PageRevisionInline]


@admin.register(PageRevision)
class PageRevisionAdmin(admin.ModelAdmin):
    list_display = ('page', 'user', 'change_log', 'created_at')
    search_fields = ('page__title', 'change_log')
    readonly_fields = ('id', 'page', 'user', 'snapshot', 'change_log', 'created_at')
