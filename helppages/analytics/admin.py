from django.contrib import admin

from .models import PageFeedback, PageView, SearchQuery


@admin.register(PageView)
class PageViewAdmin(admin.ModelAdmin):
    list_display = ('page', 'user', 'ip_address', 'viewed_at')
    list_select_related = ('page', 'user')
    date_hierarchy = 'viewed_at'


@admin.register(PageFeedback)
class PageFeedbackAdmin(admin.ModelAdmin):
    list_display = ('page', 'user', 'is_helpful', 'created_at')
    list_filter = ('is_helpful',)
    search_fields = ('page__title', 'comment')


@admin.register(SearchQuery)
class SearchQueryAdmin(admin.ModelAdmin):
    list_display = ('query', 'user', 'results_count', 'created_at')
    search_fields = ('query',)
