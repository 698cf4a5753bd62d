"""Unit tests for FakeUserRepository: verifies Port contract compliance."""

import unittest
from dataclasses import asdict

from bson import ObjectId

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import NotFoundError
from domain.model.user import User, UserCreateData, UserUpdateData


def _create_data(**kwargs) -> UserCreateData:
    defaults = {
        'first_name': 'john',
        'last_name': 'doe',
        'nickname': 'jd',
        'email': 'jd@x.com',
        'country': 'UK',
        'password': '$2b$04$hashed',
    }
    defaults.update(kwargs)
    return UserCreateData(**defaults)


class TestFakeUserRepository(unittest.TestCase):
    """Tests that FakeUserRepository correctly implements the UserRepository Protocol."""

    def setUp(self):
        self.repo = FakeUserRepository()

    # ── create + list (round-trip) ────────────────────────────

    def test_create_returns_hex_object_id(self):
        user_id = self.repo.create(_create_data())

        self.assertEqual(len(user_id), 24)
        self.assertTrue(ObjectId.is_valid(user_id))

    def test_create_then_list_returns_input_fields(self):
        user_id = self.repo.create(_create_data())

        users = self.repo.list()

        self.assertEqual(len(users), 1)
        user = users[0]
        self.assertIsInstance(user, User)
        self.assertEqual(user.id, user_id)
        self.assertEqual(user.first_name, 'john')
        self.assertEqual(user.last_name, 'doe')
        self.assertEqual(user.nickname, 'jd')
        self.assertEqual(user.email, 'jd@x.com')
        self.assertEqual(user.country, 'UK')
        self.assertEqual(user.created_at, user.updated_at)
        self.assertNotIn('password', asdict(user))

    def test_list_empty_is_not_an_error(self):
        self.assertEqual(self.repo.list(), [])

    # ── list ordering, pagination, filters ────────────────────

    def test_list_is_newest_first(self):
        ids = [self.repo.create(_create_data(nickname=f'u{i}')) for i in range(5)]

        listed = [u.id for u in self.repo.list(limit=10)]

        self.assertEqual(listed, list(reversed(ids)))

    def test_list_never_exceeds_limit(self):
        for i in range(7):
            self.repo.create(_create_data(nickname=f'u{i}'))

        self.assertEqual(len(self.repo.list(page=0, limit=3)), 3)
        self.assertEqual(len(self.repo.list(page=6, limit=3)), 1)
        self.assertEqual(self.repo.list(page=7, limit=3), [])

    def test_consecutive_pages_partition_results(self):
        for i in range(6):
            self.repo.create(_create_data(nickname=f'u{i}'))

        first = self.repo.list(page=0, limit=3)
        second = self.repo.list(page=3, limit=3)
        everything = self.repo.list(page=0, limit=6)

        self.assertEqual(set(u.id for u in first) & set(u.id for u in second), set())
        self.assertEqual([u.id for u in first + second], [u.id for u in everything])
        stamps = [u.created_at for u in everything]
        self.assertEqual(stamps, sorted(stamps, reverse=True))

    def test_list_filters_by_country_and_email(self):
        self.repo.create(_create_data(country='UK', email='a@x.com'))
        self.repo.create(_create_data(country='UK', email='b@x.com'))
        self.repo.create(_create_data(country='FR', email='a@x.com'))

        self.assertEqual(len(self.repo.list(country='UK')), 2)
        self.assertEqual(len(self.repo.list(email='a@x.com')), 2)
        both = self.repo.list(country='UK', email='a@x.com')
        self.assertEqual(len(both), 1)
        self.assertEqual((both[0].country, both[0].email), ('UK', 'a@x.com'))

    def test_list_rejects_invalid_window(self):
        with self.assertRaises(ValueError):
            self.repo.list(page=-1)
        with self.assertRaises(ValueError):
            self.repo.list(limit=0)

    # ── update ────────────────────────────────────────────────

    def test_update_changes_only_present_fields(self):
        user_id = self.repo.create(_create_data())
        original = self.repo.list()[0]

        updated = self.repo.update(user_id, UserUpdateData(first_name='jane'))

        self.assertEqual(updated.first_name, 'jane')
        self.assertEqual(updated.last_name, original.last_name)
        self.assertEqual(updated.nickname, original.nickname)
        self.assertEqual(updated.email, original.email)
        self.assertEqual(updated.country, original.country)
        self.assertEqual(updated.created_at, original.created_at)

    def test_update_strictly_increases_updated_at(self):
        user_id = self.repo.create(_create_data())
        before = self.repo.list()[0].updated_at

        first = self.repo.update(user_id, UserUpdateData())
        second = self.repo.update(user_id, UserUpdateData(country='FR'))

        self.assertGreater(first.updated_at, before)
        self.assertGreater(second.updated_at, first.updated_at)
        self.assertLessEqual(second.created_at, second.updated_at)

    def test_update_stores_new_password_hash(self):
        user_id = self.repo.create(_create_data(password='old-hash'))

        self.repo.update(user_id, UserUpdateData(password='new-hash'))

        self.assertEqual(self.repo.passwords[ObjectId(user_id)], 'new-hash')

    def test_update_missing_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.repo.update(str(ObjectId()), UserUpdateData(first_name='x'))

    def test_update_malformed_id_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.repo.update('not-a-hex-id', UserUpdateData(first_name='x'))

    # ── delete ────────────────────────────────────────────────

    def test_delete_removes_user(self):
        user_id = self.repo.create(_create_data())

        self.assertIsNone(self.repo.delete(user_id))
        self.assertEqual(self.repo.list(), [])

    def test_operations_after_delete_raise_not_found(self):
        user_id = self.repo.create(_create_data())
        self.repo.delete(user_id)

        with self.assertRaises(NotFoundError):
            self.repo.update(user_id, UserUpdateData(first_name='x'))
        with self.assertRaises(NotFoundError):
            self.repo.delete(user_id)

    def test_delete_malformed_id_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.repo.delete('1234')


if __name__ == '__main__':
    unittest.main()
