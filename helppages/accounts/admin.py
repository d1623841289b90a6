from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import ApiKey, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Админ-панель для пользователя HelpPages"""

    model = User
    list_display = ('email', 'username', 'role', 'full_name', 'is_public', 'is_active', 'created_at')
    list_filter = ('role', 'is_public', 'is_staff', 'is_active')
    search_fields = ('email', 'username', 'full_name')
    ordering = ('-created_at',)

    fieldsets = (
        (None, {'fields': ('email', 'username', 'password')}),
        ('Профиль', {'fields': ('full_name', 'avatar_url', 'bio', 'is_public')}),
        ('Роль и права', {'fields': ('role', 'is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Служебное', {'fields': ('created_by', 'last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'username', 'role', 'password1', 'password2'),
        }),
    )


@admin.register(ApiKey)
class ApiKeyAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'masked_key', 'last_used_at', 'expires_at', 'created_at')
    search_fields = ('name', 'user__username', 'user__email')
    readonly_fields = ('key', 'last_used_at', 'created_at')
