"""Unit tests for UserService."""

import unittest

from adapter.fake.session_repository import FakeSessionRepository
from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidSessionError,
    UserNotFoundError,
    ValidationError,
)
from services.auth_service import AuthService
from services.user_service import UserService


class UserServiceTestCase(unittest.TestCase):

    def setUp(self):
        self.users = FakeUserRepository()
        self.sessions = FakeSessionRepository()
        self.auth = AuthService(self.users, self.sessions)
        self.service = UserService(self.users, self.sessions)
        self.ann = self.auth.register('Ann', 'ann@x.io', 'secret1')
        self.user_id = self.ann.user.id


class TestProfile(UserServiceTestCase):

    def test_get_profile(self):
        profile = self.service.get_profile(self.user_id)
        self.assertEqual(profile.email, 'ann@x.io')
        self.assertFalse(hasattr(profile, 'password_hash'))

    def test_get_profile_unknown_user(self):
        with self.assertRaises(UserNotFoundError):
            self.service.get_profile('missing')

    def test_update_name_and_email(self):
        profile = self.service.update_profile(self.user_id, name='  Ann Lee ', email='Ann.Lee@x.io')

        self.assertEqual(profile.name, 'Ann Lee')
        self.assertEqual(profile.email, 'ann.lee@x.io')
        self.auth.login('ann.lee@x.io', 'secret1')

    def test_update_without_changes_returns_profile(self):
        profile = self.service.update_profile(self.user_id)
        self.assertEqual(profile.name, 'Ann')

    def test_update_rejects_short_name(self):
        with self.assertRaises(ValidationError):
            self.service.update_profile(self.user_id, name='A')

    def test_update_rejects_bad_email(self):
        with self.assertRaises(ValidationError):
            self.service.update_profile(self.user_id, email='nope')

    def test_update_rejects_taken_email(self):
        self.auth.register('Bob', 'bob@x.io', 'secret2')

        with self.assertRaises(DuplicateEmailError):
            self.service.update_profile(self.user_id, email='bob@x.io')

    def test_list_users(self):
        self.auth.register('Bob', 'bob@x.io', 'secret2')

        emails = [u.email for u in self.service.list_users()]

        self.assertEqual(sorted(emails), ['ann@x.io', 'bob@x.io'])


class TestChangePassword(UserServiceTestCase):

    def test_change_password(self):
        self.service.change_password(self.user_id, 'secret1', 'secret2')

        self.auth.login('ann@x.io', 'secret2')
        with self.assertRaises(InvalidCredentialsError):
            self.auth.login('ann@x.io', 'secret1')

    def test_wrong_current_password(self):
        with self.assertRaises(InvalidCredentialsError):
            self.service.change_password(self.user_id, 'wrong', 'secret2')

    def test_new_password_too_short(self):
        with self.assertRaises(ValidationError):
            self.service.change_password(self.user_id, 'secret1', 'abc')
        self.auth.login('ann@x.io', 'secret1')

    def test_unknown_user(self):
        with self.assertRaises(UserNotFoundError):
            self.service.change_password('missing', 'secret1', 'secret2')


class TestDeleteAccount(UserServiceTestCase):

    def test_delete_removes_user_and_sessions(self):
        other = self.auth.login('ann@x.io', 'secret1')

        self.service.delete_account(self.user_id)

        self.assertIsNone(self.users.get_by_id(self.user_id))
        for sid in (self.ann.session.session_id, other.session.session_id):
            with self.assertRaises(InvalidSessionError):
                self.auth.validate_session(sid)

    def test_delete_unknown_user(self):
        with self.assertRaises(UserNotFoundError):
            self.service.delete_account('missing')


if __name__ == '__main__':
    unittest.main()
