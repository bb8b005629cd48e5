# tests/test_auth_api.py

from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from jose import jwt

from apps.core.auth_service import auth_service
from apps.core.models import User

pytestmark = pytest.mark.django_db


class TestRegister:

    def test_register_returns_user_and_token(self, api):
        response = api.post('/api/auth/register', {
            'email': 'New.User@Example.com',
            'name': 'New User',
            'password': 'secret123',
        })

        assert response.status_code == 201
        body = response.json()
        assert body['user']['email'] == 'new.user@example.com'
        assert body['user']['login'] == 'newuser'
        assert 'password' not in body['user']
        assert auth_service.decode_token(body['token'])['user_id'] == body['user']['id']

    def test_duplicate_email_conflicts(self, api, user):
        response = api.post('/api/auth/register', {
            'email': 'ANA@example.com',
            'name': 'Again',
            'password': 'secret123',
        })

        assert response.status_code == 409
        assert response.json() == {'error': 'Email already registered', 'status': 409}

    def test_validation_errors_list_fields(self, api):
        response = api.post('/api/auth/register', {'email': 'not-an-email', 'password': '123'})

        assert response.status_code == 400
        fields = {error['field'] for error in response.json()['errors']}
        assert fields == {'email', 'name', 'password'}

    def test_login_handles_are_unique(self, api, user):
        response = api.post('/api/auth/register', {
            'email': 'ana@another.org',
            'name': 'Other Ana',
            'password': 'secret123',
        })

        assert response.status_code == 201
        assert response.json()['user']['login'] == 'ana2'

    def test_invalid_json_body(self, api):
        response = api.client.post('/api/auth/register', 'not json', content_type='application/json')

        assert response.status_code == 400
        assert response.json()['error'] == 'Invalid JSON body'


class TestLogin:

    def test_login_with_valid_credentials(self, api, user):
        response = api.post('/api/auth/login', {'email': 'ana@example.com', 'password': 'secret123'})

        assert response.status_code == 200
        assert response.json()['user']['id'] == user.pk

    def test_wrong_password(self, api, user):
        response = api.post('/api/auth/login', {'email': 'ana@example.com', 'password': 'nope'})

        assert response.status_code == 401
        assert response.json()['error'] == 'Invalid credentials'

    def test_unknown_email(self, api):
        response = api.post('/api/auth/login', {'email': 'ghost@example.com', 'password': 'secret123'})
        assert response.status_code == 401


class TestMe:

    def test_me_returns_profile(self, admin_api, user):
        response = admin_api.get('/api/auth/me')

        assert response.status_code == 200
        assert response.json()['user']['email'] == user.email

    def test_missing_token(self, api):
        response = api.get('/api/auth/me')

        assert response.status_code == 401
        assert response.json()['error'] == 'Authentication required'

    def test_expired_token(self, api, user, settings):
        claims = {
            'user_id': user.pk,
            'email': user.email,
            'exp': datetime.now(dt_timezone.utc) - timedelta(minutes=1),
        }
        api.token = jwt.encode(claims, settings.SPRINTBOARD_JWT_SECRET, algorithm='HS256')

        response = api.get('/api/auth/me')

        assert response.status_code == 401
        assert response.json()['error'] == 'Invalid or expired token'

    def test_token_signed_with_other_secret(self, api, user):
        api.token = jwt.encode({'user_id': user.pk}, 'another-secret', algorithm='HS256')
        assert api.get('/api/auth/me').status_code == 401

    def test_deleted_account_is_not_found(self, admin_api, user):
        User.objects.filter(pk=user.pk).delete()

        response = admin_api.get('/api/auth/me')
        assert response.status_code == 404


def test_protected_endpoint_requires_token(api):
    response = api.get('/api/teams')
    assert response.status_code == 401
