"""
Следит за локальным markdown-файлом и автосохраняет его в страницу.

    python manage.py autosave_page <page_id> docs/intro.md --user anna

Сохранение идёт через тот же путь, что и автосейв редактора:
debounce, пропуск неизменённых данных и порог ревизий.
"""
import os
import time

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db.models import Q

from documentation.lookups import parse_uuid
from pages.autosave import Autosaver
from pages.models import Page
from pages.services import update_page


class Command(BaseCommand):
    help = "Watches a markdown file and autosaves its content into a page"

    def add_arguments(self, parser):
        parser.add_argument('page_id')
        parser.add_argument('path')
        parser.add_argument('--user', required=True, help='Username or email of the editor')
        parser.add_argument('--delay', type=float, default=2.0, help='Debounce delay in seconds')
        parser.add_argument('--interval', type=float, default=1.0, help='File polling interval in seconds')
        parser.add_argument('--max-polls', type=int, default=0, help='Stop after N polls (0 = until Ctrl+C)')

    def handle(self, *args, **options):
        user = get_user_model().objects.filter(
            Q(username=options['user']) | Q(email__iexact=options['user'])
        ).first()
        if user is None:
            raise CommandError(f"User {options['user']} not found")

        page_pk = parse_uuid(options['page_id'])
        if page_pk is None or not Page.objects.filter(pk=page_pk).exists():
            raise CommandError(f"Page {options['page_id']} not found")

        path = options['path']
        if not os.path.isfile(path):
            raise CommandError(f'File {path} does not exist')

        def save(data):
            page = Page.objects.select_related('doc').get(pk=page_pk)
            update_page(user, page, data, is_autosave=True)
            self.stdout.write(f"Saved {len(data['content'])} chars")

        def on_error(error):
            self.stderr.write(self.style.ERROR(f'Autosave failed: {error}'))

        saver = Autosaver(save, delay=options['delay'], on_error=on_error)
        # Базовая точка: контент, который уже лежит в базе
        saver.update({'content': Page.objects.get(pk=page_pk).content})

        self.stdout.write(f'Watching {path} (Ctrl+C to stop)')
        last_mtime = None
        polls = 0
        try:
            while True:
                mtime = os.path.getmtime(path)
                if mtime != last_mtime:
                    last_mtime = mtime
                    with open(path, encoding='utf-8') as f:
                        saver.update({'content': f.read()})
                polls += 1
                if options['max_polls'] and polls >= options['max_polls']:
                    break
                time.sleep(options['interval'])
        except KeyboardInterrupt:
            pass
        finally:
            saver.flush()

        self.stdout.write(self.style.SUCCESS('Autosave stopped'))
