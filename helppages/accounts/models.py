import secrets

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

USERNAME_REGEX = r'^[a-zA-Z0-9_-]+$'
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30

API_KEY_PREFIX = 'hp_'


class UserManager(BaseUserManager):
    """Менеджер пользователей, где email - уникальный идентификатор для входа"""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError(_('Email is required'))
        email = self.normalize_email(email)
        if not extra_fields.get('username'):
            # username = субдомен, поэтому без него пользователя не бывает
            extra_fields['username'] = email.split('@')[0].lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', User.Role.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True'))

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Пользователь HelpPages.

    Вход по email. username уникален и одновременно является
    субдоменом пользователя: anna → anna.helppages.ai.
    Роль глобальная (admin / editor / viewer), см. accounts.roles.
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        EDITOR = 'editor', 'Editor'
        VIEWER = 'viewer', 'Viewer'

    username = models.CharField(
        _('username'),
        max_length=USERNAME_MAX_LENGTH,
        unique=True,
        validators=[
            RegexValidator(USERNAME_REGEX, 'Username can only contain letters, numbers, underscores, and hyphens'),
            MinLengthValidator(USERNAME_MIN_LENGTH),
        ],
        help_text=_('Публичный адрес: <username>.helppages.ai'),
    )
    email = models.EmailField(_('email address'), unique=True)
    full_name = models.CharField(max_length=200, blank=True, default='')
    avatar_url = models.URLField(max_length=500, blank=True, default='')
    bio = models.TextField(blank=True, default='')

    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.VIEWER,
        db_index=True,
        help_text=_('Глобальная роль: admin, editor или viewer'),
    )
    is_public = models.BooleanField(
        default=True,
        help_text=_('Показывать ли публичный индекс документаций пользователя'),
    )
    created_by = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_users',
        help_text=_('Админ, создавший пользователя. Пусто при самостоятельной регистрации'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    objects = UserManager()

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'user'
        verbose_name_plural = 'users'

    def __str__(self):
        return f'{self.username} <{self.email}>'

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN

    @property
    def is_editor(self):
        return self.role == self.Role.EDITOR


def generate_api_key():
    return f'{API_KEY_PREFIX}{secrets.token_urlsafe(32)}'


class ApiKey(models.Model):
    """Ключ для внешнего API (/api/v1/), передаётся в заголовке X-API-Key."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='api_keys')
    name = models.CharField(max_length=100)
    key = models.CharField(max_length=64, unique=True, default=generate_api_key, editable=False)
    last_used_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'API key'
        verbose_name_plural = 'API keys'

    def __str__(self):
        return f'{self.name} ({self.user.username})'

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at <= timezone.now()

    @property
    def masked_key(self):
        return f'{self.key[:7]}…{self.key[-4:]}'
