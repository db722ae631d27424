"""
Authentication and session tests.

Covers login validation, bearer token checks, logout bookkeeping and
session invalidation on deactivation or expiry.
"""

from datetime import timedelta

from conftest import auth_headers, get_auth_token
from office_beverages.extensions import db
from office_beverages.models import User, UserSession
from office_beverages.services import auth_service, session_service
from office_beverages.time_utils import utcnow


class TestLogin:

    def test_login_returns_token_and_user(self, client, seed):
        resp = client.post('/api/auth/login', json={'username': 'ahmed', 'password': 'ahmed123'})

        assert resp.status_code == 200
        body = resp.json
        assert body['success'] is True
        assert body['message'] == 'Login successful'
        assert len(body['data']['token']) == 64
        assert body['data']['user']['username'] == 'ahmed'
        assert 'password_hash' not in body['data']['user']
        assert body['data']['expiresAt'].endswith('Z')

    def test_login_stores_only_token_hash(self, client, db_session, seed):
        token = get_auth_token(client, 'ahmed', 'ahmed123')

        db_session.expire_all()
        row = db_session.query(UserSession).one()
        assert row.token_hash == session_service.hash_token(token)
        assert row.token_hash != token
        assert row.is_active is True

    def test_login_stamps_last_login(self, client, db_session, seed):
        get_auth_token(client, 'sara', 'sara123')

        db_session.expire_all()
        assert db_session.query(User).filter_by(username='sara').one().last_login_at is not None

    def test_wrong_password_401(self, client, seed):
        resp = client.post('/api/auth/login', json={'username': 'ahmed', 'password': 'wrong-pass'})
        assert resp.status_code == 401
        assert resp.json['message'] == 'Invalid credentials'

    def test_unknown_user_same_message(self, client, seed):
        resp = client.post('/api/auth/login', json={'username': 'nobody', 'password': 'whatever1'})
        assert resp.status_code == 401
        assert resp.json['message'] == 'Invalid credentials'

    def test_inactive_user_cannot_login(self, client, db_session, seed):
        seed['users']['sara'].is_active = False
        db_session.commit()

        resp = client.post('/api/auth/login', json={'username': 'sara', 'password': 'sara123'})
        assert resp.status_code == 401

    def test_missing_fields_400(self, client, seed):
        resp = client.post('/api/auth/login', json={})
        assert resp.status_code == 400
        fields = {e['field'] for e in resp.json['errors']}
        assert fields == {'username', 'password'}

    def test_short_values_400(self, client, seed):
        resp = client.post('/api/auth/login', json={'username': 'ab', 'password': '123'})
        assert resp.status_code == 400
        messages = {e['field']: e['message'] for e in resp.json['errors']}
        assert messages['username'] == 'Username must be between 3 and 50 characters'
        assert messages['password'] == 'Password must be at least 6 characters'


class TestBearerToken:

    def test_no_token_401(self, client, seed):
        resp = client.get('/api/auth/me')
        assert resp.status_code == 401
        assert resp.json == {'success': False, 'message': 'Authentication required'}

    def test_garbage_token_401(self, client, seed):
        resp = client.get('/api/auth/me', headers=auth_headers('not-a-token'))
        assert resp.status_code == 401
        assert resp.json['message'] == 'Invalid or expired token'

    def test_me_returns_profile(self, client, employee_headers):
        resp = client.get('/api/auth/me', headers=employee_headers)
        assert resp.status_code == 200
        assert resp.json['data']['full_name'] == 'Ahmed Hassan'
        assert resp.json['data']['department'] == 'IT'

    def test_expired_session_rejected_and_ended(self, client, db_session, seed):
        token = get_auth_token(client, 'ahmed', 'ahmed123')
        row = db_session.query(UserSession).one()
        row.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        resp = client.get('/api/auth/me', headers=auth_headers(token))
        assert resp.status_code == 401

        db_session.expire_all()
        row = db_session.query(UserSession).one()
        assert row.is_active is False
        assert row.end_reason == 'Expired'

    def test_deactivated_user_token_stops_working(self, client, db_session, seed):
        token = get_auth_token(client, 'sara', 'sara123')
        seed['users']['sara'].is_active = False
        db_session.commit()

        assert client.get('/api/auth/me', headers=auth_headers(token)).status_code == 401


class TestLogout:

    def test_logout_ends_session_with_duration(self, client, db_session, seed):
        token = get_auth_token(client, 'ahmed', 'ahmed123')

        resp = client.post('/api/auth/logout', headers=auth_headers(token))
        assert resp.status_code == 200
        session = resp.json['data']['session']
        assert session['is_active'] is False
        assert session['logout_time'] is not None
        assert session['session_duration'] == 0
        assert session['end_reason'] == 'User logout'

        assert client.get('/api/auth/me', headers=auth_headers(token)).status_code == 401

    def test_logout_only_ends_presented_session(self, client, seed):
        first = get_auth_token(client, 'ahmed', 'ahmed123')
        second = get_auth_token(client, 'ahmed', 'ahmed123')

        client.post('/api/auth/logout', headers=auth_headers(first))

        assert client.get('/api/auth/me', headers=auth_headers(second)).status_code == 200

    def test_logout_all(self, client, seed):
        tokens = [get_auth_token(client, 'ahmed', 'ahmed123') for _ in range(3)]
        other = get_auth_token(client, 'sara', 'sara123')

        resp = client.post('/api/auth/logout-all', headers=auth_headers(tokens[0]))
        assert resp.status_code == 200
        assert resp.json['data'] == {'sessionsEnded': 3}

        for token in tokens:
            assert client.get('/api/auth/me', headers=auth_headers(token)).status_code == 401
        assert client.get('/api/auth/me', headers=auth_headers(other)).status_code == 200


class TestPasswordHashing:

    def test_hash_and_verify(self, app):
        with app.app_context():
            hashed = auth_service.hash_password('secret123')
        assert hashed != 'secret123'
        assert auth_service.verify_password('secret123', hashed)
        assert not auth_service.verify_password('secret124', hashed)

    def test_malformed_hash_is_rejected(self):
        assert auth_service.verify_password('secret123', 'not-a-bcrypt-hash') is False

    def test_cleanup_removes_old_ended_sessions(self, client, db_session, seed):
        token = get_auth_token(client, 'ahmed', 'ahmed123')
        client.post('/api/auth/logout', headers=auth_headers(token))
        get_auth_token(client, 'ahmed', 'ahmed123')

        db_session.expire_all()
        for row in db_session.query(UserSession).all():
            row.login_time = utcnow() - timedelta(days=40)
        db_session.commit()

        assert session_service.cleanup_ended_sessions(older_than_days=30) == 1
        assert db.session.query(UserSession).count() == 1
