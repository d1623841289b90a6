import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('documentation', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Page',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=300)),
                ('slug', models.SlugField(max_length=200)),
                ('summary', models.TextField(blank=True, null=True)),
                ('content', models.TextField(blank=True, default='', help_text='Markdown')),
                ('draft_content', models.TextField(blank=True, null=True)),
                ('search_index', models.TextField(blank=True, default='', help_text='title + content + summary в нижнем регистре')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('published', 'Published')], db_index=True, default='draft', max_length=10)),
                ('position', models.IntegerField(default=0)),
                ('view_count', models.PositiveIntegerField(default=0)),
                ('author', models.CharField(blank=True, default='', max_length=200)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('meta_title', models.CharField(blank=True, default='', max_length=300)),
                ('meta_description', models.TextField(blank=True, default='')),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('last_edited_by', models.CharField(blank=True, default='', max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('doc', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pages', to='documentation.doc')),
                ('doc_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='pages', to='documentation.docitem')),
                ('nav_header', models.ForeignKey(blank=True, help_text='Раздел навигации. При удалении раздела страница остаётся без него', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pages', to='documentation.navheader')),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='pages.page')),
                ('user', models.ForeignKey(help_text='Автор страницы', on_delete=django.db.models.deletion.CASCADE, related_name='pages', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'page',
                'verbose_name_plural': 'pages',
                'ordering': ['position', 'created_at'],
                'unique_together': {('doc', 'doc_item', 'slug')},
            },
        ),
        migrations.CreateModel(
            name='PageRevision',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('snapshot', models.JSONField()),
                ('change_log', models.CharField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('page', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='revisions', to='pages.page')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='page_revisions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'page revision',
                'verbose_name_plural': 'page revisions',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='page',
            index=models.Index(fields=['doc', 'status'], name='page_doc_status_idx'),
        ),
        migrations.AddIndex(
            model_name='page',
            index=models.Index(fields=['nav_header', 'position'], name='page_nav_position_idx'),
        ),
    ]
