"""
Тесты аккаунтов: роли, регистрация, JWT, автологин, управление
пользователями и API-ключи.

Запуск:
  pytest accounts/tests.py
"""
from datetime import timedelta
from unittest.mock import MagicMock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import RequestFactory, TestCase
from django.utils import timezone
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, PermissionDenied
from rest_framework.test import APIClient

from accounts import roles
from accounts.authentication import ApiKeyAuthentication
from accounts.models import ApiKey

User = get_user_model()


def make_user(username, role=roles.EDITOR, **extra):
    return User.objects.create_user(
        f'{username}@example.com', 'secret123', username=username, role=role, **extra
    )


class RoleMatrixTests(TestCase):

    def test_admin_has_every_action(self):
        self.assertTrue(all(roles.get_permissions(roles.ADMIN).values()))

    def test_editor_permissions(self):
        perms = roles.get_permissions(roles.EDITOR)
        self.assertTrue(perms['can_create'])
        self.assertTrue(perms['can_publish'])
        self.assertFalse(perms['can_delete'])
        self.assertFalse(perms['can_manage_users'])

    def test_viewer_and_unknown_role_get_nothing(self):
        self.assertFalse(any(roles.get_permissions(roles.VIEWER).values()))
        self.assertFalse(any(roles.get_permissions('superhero').values()))

    def test_anonymous_cannot_perform_actions(self):
        self.assertFalse(roles.can_perform_action(MagicMock(is_authenticated=False), 'can_create'))

    def test_has_role_accepts_single_role_and_tuple(self):
        user = MagicMock(is_authenticated=True, role=roles.EDITOR)
        self.assertTrue(roles.has_role(user, roles.EDITOR))
        self.assertTrue(roles.has_role(user, (roles.ADMIN, roles.EDITOR)))
        self.assertFalse(roles.has_role(user, roles.ADMIN))

    def test_require_role_errors(self):
        with self.assertRaises(NotAuthenticated):
            roles.require_role(MagicMock(is_authenticated=False), roles.ADMIN)
        with self.assertRaises(PermissionDenied) as ctx:
            roles.require_role(MagicMock(is_authenticated=True, role=roles.VIEWER), (roles.ADMIN, roles.EDITOR))
        self.assertIn('Requires admin or editor role, but user has viewer role', str(ctx.exception.detail))


class UserModelTests(TestCase):

    def test_username_defaults_to_email_local_part(self):
        user = User.objects.create_user('Anna.Doc@example.com', 'secret123')
        self.assertEqual(user.username, 'anna.doc')
        self.assertEqual(user.role, roles.VIEWER)

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser('root@example.com', 'secret123', username='root')
        self.assertTrue(user.is_admin)
        self.assertTrue(user.is_staff)

    def test_api_key_generation_and_masking(self):
        user = make_user('keyowner')
        api_key = ApiKey.objects.create(user=user, name='CI')
        self.assertTrue(api_key.key.startswith('hp_'))
        self.assertNotEqual(api_key.masked_key, api_key.key)
        self.assertTrue(api_key.masked_key.startswith('hp_'))
        self.assertFalse(api_key.is_expired)


class SignupTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def _signup(self, email, username, password='secret123'):
        return self.client.post('/api/auth/signup/', {
            'email': email, 'username': username, 'password': password,
        }, format='json')

    def test_first_user_becomes_admin(self):
        resp = self._signup('first@example.com', 'first')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['user']['username'], 'first')
        self.assertEqual(User.objects.get(username='first').role, roles.ADMIN)

    def test_next_users_get_default_role(self):
        self._signup('first@example.com', 'first')
        resp = self._signup('second@example.com', 'second')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(User.objects.get(username='second').role, roles.VIEWER)

    def test_duplicate_email_and_username(self):
        self._signup('dup@example.com', 'dup')
        resp = self._signup('DUP@example.com', 'other')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Email already in use')

        resp = self._signup('new@example.com', 'dup')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Username already taken')

    def test_invalid_username_and_short_password(self):
        resp = self._signup('a@example.com', 'bad name!')
        self.assertEqual(resp.status_code, 400)
        self.assertIn('username', resp.data)

        resp = self._signup('b@example.com', 'valid-name', password='123')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Password must be at least 6 characters')


class TokenTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = make_user('anna')

    def test_token_with_case_insensitive_email(self):
        resp = self.client.post('/api/auth/token/', {
            'email': 'ANNA@example.com', 'password': 'secret123',
        }, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertIn('access', resp.data)
        self.assertIn('refresh', resp.data)

    def test_wrong_password(self):
        resp = self.client.post('/api/auth/token/', {
            'email': 'anna@example.com', 'password': 'nope',
        }, format='json')
        self.assertEqual(resp.status_code, 401)

    def test_profile_includes_permissions(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get('/api/auth/profile/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['username'], 'anna')
        self.assertTrue(resp.data['permissions']['can_create'])
        self.assertFalse(resp.data['permissions']['can_manage_users'])

    def test_profile_requires_auth(self):
        resp = self.client.get('/api/auth/profile/')
        self.assertEqual(resp.status_code, 401)


class AutoLoginTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.user = make_user('anna')

    def test_token_exchange_is_one_time(self):
        resp = self.client.post('/api/auth/auto-login/', {
            'email': 'anna@example.com', 'password': 'secret123',
        }, format='json')
        self.assertEqual(resp.status_code, 200)
        token = resp.data['token']
        self.assertIn('anna.helppages.ai', resp.data['redirect_url'])
        self.assertIn(token, resp.data['redirect_url'])

        resp = self.client.get('/api/auth/auto-login/', {'token': token})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['username'], 'anna')
        self.assertIn('access', resp.data)

        resp = self.client.get('/api/auth/auto-login/', {'token': token})
        self.assertEqual(resp.status_code, 401)

    def test_bad_credentials(self):
        resp = self.client.post('/api/auth/auto-login/', {
            'email': 'anna@example.com', 'password': 'wrong-pass',
        }, format='json')
        self.assertEqual(resp.status_code, 401)

    def test_missing_token(self):
        resp = self.client.get('/api/auth/auto-login/')
        self.assertEqual(resp.status_code, 400)


class UserManagementTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = make_user('boss', role=roles.ADMIN)
        self.editor = make_user('writer', role=roles.EDITOR)
        self.viewer = make_user('reader', role=roles.VIEWER)

    def test_list_requires_admin(self):
        self.client.force_authenticate(self.editor)
        self.assertEqual(self.client.get('/api/users/').status_code, 403)

        self.client.force_authenticate(self.admin)
        resp = self.client.get('/api/users/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data), 3)
        self.assertIn('pages_count', resp.data[0])

    def test_admin_creates_user_with_default_editor_role(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post('/api/users/', {
            'email': 'new@example.com', 'username': 'newbie', 'password': 'secret123',
        }, format='json')
        self.assertEqual(resp.status_code, 201)
        created = User.objects.get(username='newbie')
        self.assertEqual(created.role, roles.EDITOR)
        self.assertEqual(created.created_by, self.admin)
        self.assertTrue(created.check_password('secret123'))

    def test_user_updates_own_profile(self):
        self.client.force_authenticate(self.viewer)
        resp = self.client.patch(f'/api/users/{self.viewer.pk}/', {'full_name': 'Reader One'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['full_name'], 'Reader One')

    def test_non_admin_cannot_change_role(self):
        self.client.force_authenticate(self.viewer)
        resp = self.client.patch(f'/api/users/{self.viewer.pk}/', {'role': 'admin'}, format='json')
        self.assertEqual(resp.status_code, 403)
        self.viewer.refresh_from_db()
        self.assertEqual(self.viewer.role, roles.VIEWER)

    def test_cannot_touch_other_users(self):
        self.client.force_authenticate(self.editor)
        resp = self.client.patch(f'/api/users/{self.viewer.pk}/', {'bio': 'hacked'}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_admin_changes_role_and_username_uniqueness(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.put(f'/api/users/{self.viewer.pk}/', {'role': 'editor'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['role'], 'editor')

        resp = self.client.patch(f'/api/users/{self.viewer.pk}/', {'username': 'writer'}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Username already taken')

    def test_delete(self):
        self.client.force_authenticate(self.editor)
        self.assertEqual(self.client.delete(f'/api/users/{self.viewer.pk}/').status_code, 403)

        self.client.force_authenticate(self.admin)
        resp = self.client.delete(f'/api/users/{self.admin.pk}/')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Cannot delete your own account')

        resp = self.client.delete(f'/api/users/{self.viewer.pk}/')
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(User.objects.filter(pk=self.viewer.pk).exists())


class ApiKeyTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = make_user('anna')
        self.factory = RequestFactory()

    def test_create_returns_raw_key_once(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post('/api/api-keys/', {'name': 'deploy'}, format='json')
        self.assertEqual(resp.status_code, 201)
        raw_key = resp.data['key']
        self.assertTrue(raw_key.startswith('hp_'))

        resp = self.client.get('/api/api-keys/')
        self.assertEqual(len(resp.data), 1)
        self.assertNotIn('key', resp.data[0])

    def test_delete_own_key(self):
        api_key = ApiKey.objects.create(user=self.user, name='old')
        self.client.force_authenticate(self.user)
        resp = self.client.delete(f'/api/api-keys/{api_key.pk}/')
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(ApiKey.objects.exists())

    def test_authentication_by_header(self):
        api_key = ApiKey.objects.create(user=self.user, name='ci')
        request = self.factory.get('/api/v1/pages/', HTTP_X_API_KEY=api_key.key)
        user, auth = ApiKeyAuthentication().authenticate(request)
        self.assertEqual(user, self.user)
        api_key.refresh_from_db()
        self.assertIsNotNone(api_key.last_used_at)

    def test_missing_header_is_not_an_error(self):
        request = self.factory.get('/api/v1/pages/')
        self.assertIsNone(ApiKeyAuthentication().authenticate(request))

    def test_unknown_and_expired_keys(self):
        request = self.factory.get('/api/v1/pages/', HTTP_X_API_KEY='hp_unknown')
        with self.assertRaises(AuthenticationFailed):
            ApiKeyAuthentication().authenticate(request)

        expired = ApiKey.objects.create(
            user=self.user, name='expired', expires_at=timezone.now() - timedelta(days=1)
        )
        request = self.factory.get('/api/v1/pages/', HTTP_X_API_KEY=expired.key)
        with self.assertRaises(AuthenticationFailed):
            ApiKeyAuthentication().authenticate(request)
