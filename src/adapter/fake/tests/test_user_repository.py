"""Unit tests for FakeUserRepository: verifies Port contract compliance."""

import unittest
from datetime import datetime, timezone

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import DuplicateEmailError, UserNotFoundError
from domain.model.user import User, UserRole


class UserRepositoryContract:
    """Behaviour every UserRepository adapter must share.

    Subclasses set ``self.repo`` in setUp.
    """

    repo = None

    # ── create + get (round-trip) ─────────────────────────────

    def test_create_and_get_by_id(self):
        user = self.repo.create(email='ann@x.io', password_hash='digest', name='Ann')

        self.assertIsInstance(user, User)
        self.assertTrue(user.id)
        self.assertEqual(user.role, UserRole.CUSTOMER)
        self.assertEqual(user.provider, 'local')
        self.assertFalse(user.is_email_verified)
        self.assertIsNotNone(user.created_at)

        fetched = self.repo.get_by_id(user.id)
        self.assertEqual(fetched.email, 'ann@x.io')
        self.assertEqual(fetched.password_hash, 'digest')

    def test_create_with_profile_fields(self):
        login_at = datetime(2026, 2, 1, 8, 30, tzinfo=timezone.utc)
        user = self.repo.create(
            email='bo@x.io',
            password_hash='digest',
            name='Bo',
            role=UserRole.PATIENT,
            first_name='Bo',
            provider='google',
            provider_id='g-1',
            is_email_verified=True,
            last_login_at=login_at,
        )

        fetched = self.repo.get_by_id(user.id)
        self.assertEqual(fetched.role, UserRole.PATIENT)
        self.assertEqual(fetched.first_name, 'Bo')
        self.assertEqual(fetched.provider_id, 'g-1')
        self.assertTrue(fetched.is_email_verified)
        self.assertEqual(fetched.last_login_at, login_at)

    def test_create_normalizes_email(self):
        self.repo.create(email='  Ann@X.IO ', password_hash='d', name='Ann')
        self.assertIsNotNone(self.repo.get_by_email('ann@x.io'))
        self.assertIsNotNone(self.repo.get_by_email('ANN@x.io'))

    def test_create_duplicate_email(self):
        self.repo.create(email='ann@x.io', password_hash='d', name='Ann')

        with self.assertRaises(DuplicateEmailError):
            self.repo.create(email='ANN@x.io', password_hash='d', name='Ann 2')
        self.assertEqual(len(self.repo.list_all()), 1)

    def test_get_missing(self):
        self.assertIsNone(self.repo.get_by_id('missing'))
        self.assertIsNone(self.repo.get_by_email('missing@x.io'))

    # ── update ────────────────────────────────────────────────

    def test_update_fields(self):
        user = self.repo.create(email='ann@x.io', password_hash='d', name='Ann')

        updated = self.repo.update(user.id, name='Ann Lee', provider='google')

        self.assertEqual(updated.name, 'Ann Lee')
        self.assertEqual(updated.provider, 'google')
        self.assertEqual(updated.password_hash, 'd')
        self.assertGreaterEqual(updated.updated_at, user.updated_at)
        self.assertEqual(self.repo.get_by_id(user.id).name, 'Ann Lee')

    def test_update_missing_user(self):
        with self.assertRaises(UserNotFoundError):
            self.repo.update('missing', name='x')

    def test_update_to_taken_email(self):
        self.repo.create(email='ann@x.io', password_hash='d', name='Ann')
        bob = self.repo.create(email='bob@x.io', password_hash='d', name='Bob')

        with self.assertRaises(DuplicateEmailError):
            self.repo.update(bob.id, email='Ann@x.io')
        self.assertEqual(self.repo.get_by_id(bob.id).email, 'bob@x.io')

    def test_update_keeps_own_email(self):
        ann = self.repo.create(email='ann@x.io', password_hash='d', name='Ann')
        self.assertEqual(self.repo.update(ann.id, email='ANN@x.io').email, 'ann@x.io')

    # ── delete / list ─────────────────────────────────────────

    def test_delete(self):
        user = self.repo.create(email='ann@x.io', password_hash='d', name='Ann')

        self.assertTrue(self.repo.delete(user.id))
        self.assertFalse(self.repo.delete(user.id))
        self.assertIsNone(self.repo.get_by_id(user.id))

    def test_list_all_oldest_first(self):
        first = self.repo.create(email='a@x.io', password_hash='d', name='A')
        second = self.repo.create(email='b@x.io', password_hash='d', name='B')

        ids = [u.id for u in self.repo.list_all()]
        self.assertEqual(ids, [first.id, second.id])


class TestFakeUserRepository(UserRepositoryContract, unittest.TestCase):

    def setUp(self):
        self.repo = FakeUserRepository()

    def test_returned_user_is_a_copy(self):
        user = self.repo.create(email='ann@x.io', password_hash='d', name='Ann')
        user.name = 'Mutated'
        self.assertEqual(self.repo.get_by_id(user.id).name, 'Ann')


if __name__ == '__main__':
    unittest.main()
