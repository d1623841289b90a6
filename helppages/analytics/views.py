import logging

from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.middleware import get_client_ip
from documentation.lookups import parse_uuid
from pages.models import Page

from .models import PageFeedback
from .search import search_pages, search_sections
from .tasks import log_search_query, record_page_view

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 100


class SearchView(APIView):
    """
    GET /api/search/?q=&limit=20&include_private=true

    Сначала совпавшие разделы (не больше 10), затем страницы.
    На субдомене ищет только в документациях его владельца.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        query = (request.query_params.get('q') or '').strip()
        if not query:
            return Response({'results': [], 'query': ''})

        try:
            limit = int(request.query_params.get('limit', DEFAULT_SEARCH_LIMIT))
        except ValueError:
            raise ValidationError({'limit': 'limit must be an integer'})
        limit = max(1, min(limit, MAX_SEARCH_LIMIT))
        include_private = request.query_params.get('include_private') == 'true'

        sections = search_sections(request.user, query, include_private)
        pages = search_pages(request.user, query, limit, include_private)
        results = sections + pages

        if request.user.is_authenticated:
            log_search_query.delay(request.user.pk, query, len(results))

        return Response({
            'query': query,
            'results': results,
            'total_count': len(results),
        })


class FeedbackView(APIView):
    """POST /api/feedback/ — {page_id, helpful, comment?}"""
    permission_classes = [AllowAny]

    def post(self, request):
        page_id = request.data.get('page_id')
        helpful = request.data.get('helpful')
        if not page_id or not isinstance(helpful, bool):
            raise ValidationError({'error': 'page_id and helpful are required'})

        parsed = parse_uuid(page_id)
        page = Page.objects.filter(pk=parsed).first() if parsed else None
        if page is None:
            raise NotFound('Page not found')

        PageFeedback.objects.create(
            page=page,
            user=request.user if request.user.is_authenticated else None,
            is_helpful=helpful,
            comment=request.data.get('comment') or None,
        )
        logger.info('Feedback for page %s: helpful=%s', page.pk, helpful)
        return Response({'success': True})


class TrackView(APIView):
    """POST /api/analytics/track/ — {page_id, event_type}"""
    permission_classes = [AllowAny]

    def post(self, request):
        if not request.data.get('page_id'):
            raise ValidationError({'error': 'Missing page_id'})
        page_id = parse_uuid(request.data['page_id'])
        if page_id is None:
            raise ValidationError({'error': 'Invalid page_id'})

        if request.data.get('event_type') == 'pageview':
            record_page_view.delay(
                str(page_id),
                user_id=request.user.pk if request.user.is_authenticated else None,
                ip_address=get_client_ip(request) or None,
                user_agent=request.META.get('HTTP_USER_AGENT', ''),
                referrer=request.META.get('HTTP_REFERER', ''),
            )
        return Response({'success': True})
