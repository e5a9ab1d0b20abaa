"""Tests for the JSON file fallback store and its repositories."""

import json
import shutil
import tempfile
import unittest
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

from adapter.fake.tests.test_session_repository import SessionRepositoryContract
from adapter.fake.tests.test_user_repository import UserRepositoryContract
from adapter.jsonfile.session_repository import JsonSessionRepository
from adapter.jsonfile.store import CorruptStoreError, JsonFileStore
from adapter.jsonfile.user_repository import JsonUserRepository
from domain.model.errors import DuplicateEmailError


class JsonStoreTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = Path(self.tmpdir) / 'nested' / 'database.json'
        self.store = JsonFileStore(self.path)

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)


class TestJsonUserRepository(UserRepositoryContract, JsonStoreTestCase):

    def setUp(self):
        super().setUp()
        self.repo = JsonUserRepository(self.store)

    def test_data_survives_reopen(self):
        user = self.repo.create(email='ann@x.io', password_hash='d', name='Ann')

        reopened = JsonUserRepository(JsonFileStore(self.path))

        self.assertEqual(reopened.get_by_id(user.id).email, 'ann@x.io')

    def test_failed_create_leaves_file_untouched(self):
        self.repo.create(email='ann@x.io', password_hash='d', name='Ann')
        before = self.path.read_text(encoding='utf-8')

        with self.assertRaises(DuplicateEmailError):
            self.repo.create(email='ann@x.io', password_hash='d', name='Ann')

        self.assertEqual(self.path.read_text(encoding='utf-8'), before)


class TestJsonSessionRepository(SessionRepositoryContract, JsonStoreTestCase):

    def setUp(self):
        super().setUp()
        self.repo = JsonSessionRepository(self.store)

    def test_reading_a_live_session_does_not_rewrite_the_file(self):
        self.repo.create(user_id='u1', user_agent='x', session_id='s1')

        with patch.object(self.store, '_dump', wraps=self.store._dump) as dump:
            self.assertIsNotNone(self.repo.get('s1'))
            self.assertIsNone(self.repo.get('missing'))

        dump.assert_not_called()

    def test_reading_an_expired_session_rewrites_the_file_once(self):
        self.repo.create(user_id='u1', user_agent='x', session_id='old', ttl=timedelta(seconds=-1))

        with patch.object(self.store, '_dump', wraps=self.store._dump) as dump:
            self.assertIsNone(self.repo.get('old'))

        dump.assert_called_once()
        on_disk = json.loads(self.path.read_text(encoding='utf-8'))
        self.assertEqual(on_disk['sessions'], [])


class TestJsonFileStore(JsonStoreTestCase):

    def test_missing_file_reads_as_empty(self):
        self.assertEqual(self.store.read(), {'users': [], 'sessions': []})
        self.assertFalse(self.path.exists())

    def test_transaction_writes_document(self):
        with self.store.transaction() as data:
            data['users'].append({'id': 'u1'})

        on_disk = json.loads(self.path.read_text(encoding='utf-8'))
        self.assertEqual(on_disk['users'], [{'id': 'u1'}])
        self.assertEqual(on_disk['sessions'], [])

    def test_transaction_discards_changes_on_error(self):
        with self.assertRaises(RuntimeError):
            with self.store.transaction() as data:
                data['users'].append({'id': 'u1'})
                raise RuntimeError('boom')

        self.assertEqual(self.store.read()['users'], [])

    def test_corrupt_file_raises_corrupt_store_error(self):
        self.path.write_text('{"users": [', encoding='utf-8')

        with self.assertRaises(CorruptStoreError):
            self.store.read()
        with self.assertRaises(CorruptStoreError):
            with self.store.transaction():
                pass

        self.assertEqual(self.path.read_text(encoding='utf-8'), '{"users": [')

    def test_non_object_document_is_corrupt(self):
        self.path.write_text('[]', encoding='utf-8')

        with self.assertRaises(CorruptStoreError):
            self.store.read()

    def test_no_temp_files_left_behind(self):
        with self.store.transaction() as data:
            data['sessions'].append({'session_id': 's1'})

        leftovers = [p.name for p in self.path.parent.iterdir() if p.name != 'database.json']
        self.assertEqual(leftovers, [])


if __name__ == '__main__':
    unittest.main()
