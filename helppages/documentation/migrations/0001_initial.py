import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Doc',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('slug', models.SlugField(help_text='Глобально уникальный', max_length=200, unique=True)),
                ('description', models.TextField(blank=True, default='')),
                ('is_public', models.BooleanField(default=True, help_text='Видимость всех страниц документации наследуется отсюда')),
                ('theme', models.JSONField(blank=True, default=dict, help_text='Цвета, логотип и т.п.')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(help_text='Владелец документации', on_delete=django.db.models.deletion.CASCADE, related_name='docs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'documentation',
                'verbose_name_plural': 'documentations',
                'ordering': ['-updated_at'],
            },
        ),
        migrations.CreateModel(
            name='NavHeader',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('label', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=200)),
                ('position', models.IntegerField(default=0)),
                ('icon', models.CharField(blank=True, default='', max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('doc', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='nav_headers', to='documentation.doc')),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='documentation.navheader')),
            ],
            options={
                'verbose_name': 'navigation section',
                'verbose_name_plural': 'navigation sections',
                'ordering': ['position', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='DocItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('label', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('position', models.IntegerField(default=0)),
                ('is_default', models.BooleanField(default=False, help_text='Открывается по умолчанию. Не больше одного на раздел')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('nav_header', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='doc_items', to='documentation.navheader')),
            ],
            options={
                'verbose_name': 'doc item',
                'verbose_name_plural': 'doc items',
                'ordering': ['position', 'created_at'],
                'unique_together': {('nav_header', 'slug')},
            },
        ),
        migrations.AddField(
            model_name='navheader',
            name='doc_item',
            field=models.ForeignKey(blank=True, help_text='Пусто у верхнеуровневых разделов (выпадающих меню)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='nav_headers', to='documentation.docitem'),
        ),
        migrations.AddIndex(
            model_name='doc',
            index=models.Index(fields=['user', '-updated_at'], name='doc_user_updated_idx'),
        ),
        migrations.AddIndex(
            model_name='navheader',
            index=models.Index(fields=['doc', 'position'], name='navheader_doc_position_idx'),
        ),
    ]
