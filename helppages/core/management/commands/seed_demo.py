"""
Демо-данные для локальной разработки.

Использование:
    python manage.py seed_demo
    python manage.py seed_demo --password secret123

Удаляет прежних демо-пользователей (их документации и страницы
уходят каскадом) и создаёт заново.
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts import roles
from documentation.models import Doc, NavHeader
from pages.models import Page
from pages.revisions import build_search_index

DEMO_USERS = [
    {'email': 'admin@demo.helppages.ai', 'username': 'demo-admin', 'full_name': 'Demo Admin', 'role': roles.ADMIN},
    {'email': 'editor@demo.helppages.ai', 'username': 'demo-editor', 'full_name': 'Demo Editor', 'role': roles.EDITOR},
]

DEMO_DOCS = [
    {
        'owner': 'demo-admin',
        'title': 'Getting Started',
        'slug': 'demo-getting-started',
        'description': 'Everything you need to publish your first docs.',
        'sections': [
            {
                'label': 'Basics',
                'pages': [
                    ('Introduction', 'introduction', '# Introduction\n\nWelcome to **HelpPages**.\n\n## Next steps\n\n- Create a doc\n- Add a page'),
                    ('Writing pages', 'writing-pages', '# Writing pages\n\nPages are written in markdown.\n\n```\n# Heading\n```'),
                ],
            },
            {
                'label': 'Publishing',
                'pages': [
                    ('Custom subdomain', 'custom-subdomain', '# Custom subdomain\n\nEvery user gets `<username>.helppages.ai`.'),
                ],
            },
        ],
    },
    {
        'owner': 'demo-editor',
        'title': 'API Reference',
        'slug': 'demo-api-reference',
        'description': 'External API for automation.',
        'sections': [
            {
                'label': 'Pages API',
                'pages': [
                    ('Authentication', 'authentication', '# Authentication\n\nSend the `X-API-Key` header with every request.'),
                    ('Listing pages', 'listing-pages', '# Listing pages\n\n1. Call `GET /api/v1/pages/`\n2. Follow `pagination.has_more`'),
                ],
            },
        ],
    },
]


class Command(BaseCommand):
    help = "Wipes and recreates demo users, docs, sections and published pages"

    def add_arguments(self, parser):
        parser.add_argument('--password', default='demo12345', help='Password for demo users')

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()

        emails = [data['email'] for data in DEMO_USERS]
        deleted, _ = User.objects.filter(email__in=emails).delete()
        if deleted:
            self.stdout.write(f'Removed {deleted} old demo objects')

        users = {}
        for data in DEMO_USERS:
            users[data['username']] = User.objects.create_user(password=options['password'], **data)

        now = timezone.now()
        pages_created = 0
        for doc_data in DEMO_DOCS:
            owner = users[doc_data['owner']]
            doc = Doc.objects.create(
                user=owner,
                title=doc_data['title'],
                slug=doc_data['slug'],
                description=doc_data['description'],
                is_public=True,
            )
            for section_position, section_data in enumerate(doc_data['sections']):
                section = NavHeader.objects.create(
                    doc=doc,
                    label=section_data['label'],
                    slug=section_data['label'].lower().replace(' ', '-'),
                    position=section_position,
                )
                for position, (title, slug, content) in enumerate(section_data['pages']):
                    Page.objects.create(
                        doc=doc,
                        user=owner,
                        nav_header=section,
                        title=title,
                        slug=slug,
                        content=content,
                        status=Page.Status.PUBLISHED,
                        position=position,
                        published_at=now,
                        last_edited_by=owner.username,
                        search_index=build_search_index(title, content, None),
                    )
                    pages_created += 1

        self.stdout.write(self.style.SUCCESS(
            f'Demo data ready: {len(users)} users, {len(DEMO_DOCS)} docs, {pages_created} pages'
        ))
