"""Tests for the /users routes."""

import unittest

from api.tests.test_auth_routes import RouteTestCase
from domain.model.user import UserRole


class UsersRouteTestCase(RouteTestCase):

    def setUp(self):
        super().setUp()
        body = self.register().json()
        self.user_id = body['user']['id']
        self.headers = {'Authorization': f"Bearer {body['session']['session_id']}"}


class TestProfileRoutes(UsersRouteTestCase):

    def test_get_me(self):
        response = self.client.get('/users/me', headers=self.headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['email'], 'ann@x.io')

    def test_requires_session(self):
        self.assertError(self.client.get('/users/me'), 401, 'INVALID_SESSION')

    def test_update_profile(self):
        response = self.client.patch('/users/me', headers=self.headers, json={'name': 'Ann Lee'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['name'], 'Ann Lee')

    def test_update_profile_taken_email(self):
        self.register(name='Bob', email='bob@x.io')

        response = self.client.patch('/users/me', headers=self.headers, json={'email': 'bob@x.io'})

        self.assertError(response, 409, 'DUPLICATE_EMAIL')

    def test_change_password(self):
        response = self.client.post('/users/me/password', headers=self.headers, json={
            'current_password': 'secret1', 'new_password': 'secret2',
        })
        self.assertEqual(response.status_code, 200)

        login = self.client.post('/auth/login', json={'email': 'ann@x.io', 'password': 'secret2'})
        self.assertEqual(login.status_code, 200)

    def test_change_password_wrong_current(self):
        response = self.client.post('/users/me/password', headers=self.headers, json={
            'current_password': 'nope00', 'new_password': 'secret2',
        })
        self.assertError(response, 401, 'INVALID_CREDENTIALS')

    def test_delete_account(self):
        response = self.client.delete('/users/me', headers=self.headers)

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.users.get_by_id(self.user_id))
        self.assertError(self.client.get('/users/me', headers=self.headers), 401, 'INVALID_SESSION')


class TestAdminListing(UsersRouteTestCase):

    def test_non_admin_forbidden(self):
        self.assertError(self.client.get('/users', headers=self.headers), 403, 'PERMISSION_DENIED')

    def test_admin_lists_users(self):
        self.users.update(self.user_id, role=UserRole.ADMIN)
        self.register(name='Bob', email='bob@x.io')

        response = self.client.get('/users', headers=self.headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual([u['email'] for u in response.json()], ['ann@x.io', 'bob@x.io'])


if __name__ == '__main__':
    unittest.main()
