"""
Tests for accounts, JWT cookies and role permissions.
"""
import json
import re

from django.core import mail
from django.test import Client, TestCase

from apps.core.errors import AuthenticationError, ConflictError, ValidationFailed
from apps.identity import services
from apps.identity.dtos import SignupIn
from apps.identity.jwt_auth import ACCESS_COOKIE, REFRESH_COOKIE, decode_token
from apps.identity.models import User, UserRole
from apps.identity.permissions import Permissions, get_user_permissions

LINK_PATTERN = re.compile(r"uid=([^&\s]+)&token=([^\s]+)")


def link_params(message):
    return LINK_PATTERN.search(message.body).groups()


class RBACTest(TestCase):
    def test_customer_permissions(self):
        user = User.objects.create_user(email="c@test.com", password="pw", role=UserRole.CUSTOMER)
        perms = get_user_permissions(user)
        self.assertIn(Permissions.BOOKING_CREATE, perms)
        self.assertNotIn(Permissions.SERVICE_MANAGE, perms)

    def test_tasker_permissions(self):
        user = User.objects.create_user(email="t@test.com", password="pw", role=UserRole.TASKER)
        perms = get_user_permissions(user)
        self.assertIn(Permissions.WALLET_REQUEST_REFUND, perms)
        self.assertNotIn(Permissions.JOB_POST, perms)

    def test_both_roles_combine(self):
        user = User.objects.create_user(email="b@test.com", password="pw", role=UserRole.BOTH)
        perms = get_user_permissions(user)
        self.assertIn(Permissions.JOB_POST, perms)
        self.assertIn(Permissions.JOB_APPLY, perms)
        self.assertNotIn(Permissions.JOB_MODERATE, perms)

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(email="root@test.com", password="pw", role=UserRole.CUSTOMER)
        self.assertIn(Permissions.WALLET_MANAGE_REFUNDS, get_user_permissions(user))

    def test_inactive_user_has_no_permissions(self):
        user = User.objects.create_user(email="x@test.com", password="pw", role=UserRole.ADMIN, is_active=False)
        self.assertEqual(get_user_permissions(user), [])


class SignupTest(TestCase):

    def test_signup_sends_confirmation(self):
        dto = services.signup(SignupIn(
            email="  New.User@Example.com ", password="Secret123", role="tasker",
            first_name="Sara", last_name="Alaoui", preferred_language="ar",
        ))
        self.assertEqual(dto.email, "new.user@example.com")
        self.assertEqual(dto.role, UserRole.TASKER)
        self.assertEqual(dto.preferred_language, "ar")
        self.assertFalse(dto.email_verified)
        self.assertEqual(len(mail.outbox), 1)

        uid, token = link_params(mail.outbox[0])
        confirmed = services.confirm_email(uid, token)
        self.assertTrue(confirmed.email_verified)

        with self.assertRaises(ValidationFailed):
            services.confirm_email(uid, token)

    def test_confirmation_token_cannot_reset_password(self):
        services.signup(SignupIn(email="confirm@test.com", password="Secret123"))
        uid, token = link_params(mail.outbox[0])
        with self.assertRaises(ValidationFailed):
            services.confirm_password_reset(uid, token, "NewSecret999", "NewSecret999")
        user = User.objects.get(email="confirm@test.com")
        self.assertTrue(user.check_password("Secret123"))

    def test_signup_rejects_weak_password(self):
        for password in ("short1A", "alllowercase1", "ALLUPPER123", "NoDigitsHere"):
            with self.subTest(password=password):
                with self.assertRaises(ValidationFailed):
                    services.signup(SignupIn(email="a@test.com", password=password))

    def test_signup_rejects_admin_role(self):
        with self.assertRaises(ValidationFailed):
            services.signup(SignupIn(email="a@test.com", password="Secret123", role="admin"))

    def test_duplicate_email(self):
        services.signup(SignupIn(email="dup@test.com", password="Secret123"))
        with self.assertRaises(ConflictError):
            services.signup(SignupIn(email="DUP@test.com", password="Secret123"))

    def test_bad_confirmation_token(self):
        with self.assertRaises(ValidationFailed):
            services.confirm_email("bogus", "token")


class AuthAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(
            email="login@test.com", password="Secret123", role=UserRole.CUSTOMER, preferred_language='en',
        )

    def _login(self, password="Secret123"):
        return self.client.post(
            '/api/auth/login',
            data=json.dumps({'email': 'LOGIN@test.com', 'password': password}),
            content_type='application/json',
            HTTP_ACCEPT_LANGUAGE='en',
        )

    def test_login_sets_cookies(self):
        response = self._login()
        self.assertEqual(response.status_code, 200)
        self.assertIn(ACCESS_COOKIE, response.cookies)
        self.assertIn(REFRESH_COOKIE, response.cookies)

        payload = decode_token(response.cookies[ACCESS_COOKIE].value, expected_type='access')
        self.assertEqual(payload['sub'], str(self.user.id))
        self.assertEqual(payload['role'], UserRole.CUSTOMER)

        me = self.client.get('/api/auth/me')
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()['email'], 'login@test.com')

    def test_login_wrong_password(self):
        response = self._login(password="Wrong1234")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], "Invalid email or password")

    def test_disabled_account_message(self):
        self.user.is_active = False
        self.user.save()
        with self.assertRaises(AuthenticationError) as ctx:
            services.authenticate_user(None, "login@test.com", "Secret123")
        self.assertEqual(ctx.exception.message_key, "auth.accountDisabled")

    def test_error_localized_from_accept_language(self):
        response = Client().get('/api/auth/me', HTTP_ACCEPT_LANGUAGE='fr-FR,fr;q=0.9')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], "Authentification requise")
        self.assertEqual(response.json()['code'], "unauthorized")

    def test_refresh_issues_new_access_token(self):
        self._login()
        response = self.client.post('/api/auth/refresh')
        self.assertEqual(response.status_code, 200)
        self.assertIn(ACCESS_COOKIE, response.cookies)

    def test_refresh_without_cookie(self):
        response = Client().post('/api/auth/refresh')
        self.assertEqual(response.status_code, 401)

    def test_logout_clears_cookies(self):
        self._login()
        response = self.client.post('/api/auth/logout')
        self.assertEqual(response.cookies[ACCESS_COOKIE].value, '')

    def test_password_reset_flow(self):
        response = self.client.post(
            '/api/auth/password-reset/request',
            data=json.dumps({'email': 'login@test.com'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        uid, token = link_params(mail.outbox[0])

        services.confirm_password_reset(uid, token, "NewSecret1", "NewSecret1")
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("NewSecret1"))

        with self.assertRaises(ValidationFailed):
            services.confirm_password_reset(uid, token, "Another12", "Another12")

    def test_password_reset_unknown_email_is_silent(self):
        response = self.client.post(
            '/api/auth/password-reset/request',
            data=json.dumps({'email': 'nobody@test.com'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(mail.outbox), 0)

    def test_set_language(self):
        self.client.force_login(self.user)
        response = self.client.patch(
            '/api/auth/language',
            data=json.dumps({'locale': 'de'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['preferred_language'], 'de')

        bad = self.client.patch(
            '/api/auth/language',
            data=json.dumps({'locale': 'es'}),
            content_type='application/json',
        )
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(bad.json()['error'], "Nicht unterstützte Sprache: es")
