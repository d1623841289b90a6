import re

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from . import roles
from .models import ApiKey, USERNAME_REGEX, USERNAME_MIN_LENGTH, USERNAME_MAX_LENGTH

User = get_user_model()

PASSWORD_MIN_LENGTH = 6


def validate_username_format(value):
    if not re.match(USERNAME_REGEX, value or ''):
        raise serializers.ValidationError(
            'Username can only contain letters, numbers, underscores, and hyphens'
        )
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        raise serializers.ValidationError(
            f'Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters'
        )
    return value


def validate_password_length(value):
    if len(value or '') < PASSWORD_MIN_LENGTH:
        raise serializers.ValidationError(
            f'Password must be at least {PASSWORD_MIN_LENGTH} characters'
        )
    return value


class HelpPagesTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Добавляет роль и username в JWT, email ищется без учёта регистра"""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        # Роль берём только из БД
        token['role'] = user.role
        token['username'] = user.username
        return token

    def validate(self, attrs):
        attrs[self.username_field] = (attrs.get(self.username_field) or '').strip()
        user = User.objects.filter(email__iexact=attrs[self.username_field]).first()
        if user is not None:
            attrs[self.username_field] = user.email
        return super().validate(attrs)


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id', 'email', 'username', 'full_name', 'avatar_url', 'bio',
            'role', 'is_public', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class UserListSerializer(UserSerializer):
    pages_count = serializers.IntegerField(read_only=True)
    docs_count = serializers.IntegerField(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['pages_count', 'docs_count']
        read_only_fields = fields


class ProfileSerializer(UserSerializer):
    """Профиль текущего пользователя + матрица прав его роли"""

    permissions = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['permissions']
        read_only_fields = fields

    def get_permissions(self, obj):
        return roles.get_permissions(obj.role)


class SignupSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    username = serializers.CharField()
    full_name = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('Email already in use')
        return value

    def validate_username(self, value):
        value = validate_username_format(value.strip())
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError('Username already taken')
        return value

    def validate_password(self, value):
        return validate_password_length(value)


class UserCreateSerializer(SignupSerializer):
    """Создание пользователя админом: роль задаётся явно, по умолчанию editor"""

    role = serializers.ChoiceField(choices=roles.ROLES, default=roles.EDITOR)
    avatar_url = serializers.URLField(required=False, allow_blank=True, default='')
    bio = serializers.CharField(required=False, allow_blank=True, default='')
    is_public = serializers.BooleanField(required=False, default=True)

    def create(self, validated_data):
        password = validated_data.pop('password')
        email = validated_data.pop('email')
        return User.objects.create_user(email, password, **validated_data)


class UserUpdateSerializer(serializers.ModelSerializer):
    """
    Обновление пользователя.

    role / email / username может менять только админ, остальные
    поля — сам пользователь или админ (проверяется во view).
    """

    password = serializers.CharField(write_only=True, required=False)
    role = serializers.ChoiceField(choices=roles.ROLES, required=False)

    class Meta:
        model = User
        fields = ['email', 'username', 'full_name', 'avatar_url', 'bio', 'is_public', 'role', 'password']
        extra_kwargs = {
            'email': {'required': False, 'validators': []},
            'username': {'required': False, 'validators': []},
            'full_name': {'required': False, 'allow_blank': True},
            'avatar_url': {'required': False, 'allow_blank': True},
            'bio': {'required': False, 'allow_blank': True},
        }

    def validate_username(self, value):
        value = validate_username_format(value.strip())
        if User.objects.filter(username__iexact=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError('Username already taken')
        return value

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError('Email already in use')
        return value

    def validate_password(self, value):
        return validate_password_length(value)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class ApiKeySerializer(serializers.ModelSerializer):
    masked_key = serializers.CharField(read_only=True)

    class Meta:
        model = ApiKey
        fields = ['id', 'name', 'masked_key', 'last_used_at', 'expires_at', 'created_at']
        read_only_fields = ['id', 'masked_key', 'last_used_at', 'created_at']
