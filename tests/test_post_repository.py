import tempfile
import unittest
from datetime import datetime, timedelta
from unittest import mock

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from extensions import db
from models.post import Post
from models.post_repository import PostRepository
from utils.errors import NotFound, OperationTimeout, StorageError

from tests.support import dispose, make_test_app


class PostRepositoryTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.app = make_test_app(self._tmp.name)
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.repository = PostRepository(db.session)

    def tearDown(self):
        self.ctx.pop()
        dispose(self.app)
        self._tmp.cleanup()

    def _row_count(self) -> int:
        return db.session.execute(select(func.count()).select_from(Post)).scalar_one()

    def test_create_assigns_id_and_created_at(self):
        first = self.repository.create("first", "/uploads/1.jpg")
        second = self.repository.create("second", "/uploads/2.jpg")

        self.assertGreater(second.id, first.id)
        self.assertIsInstance(first.created_at, datetime)
        self.assertEqual(first.to_dict()["imageUrl"], "/uploads/1.jpg")

    def test_get_by_id(self):
        created = self.repository.create("caption", "/uploads/1.jpg")
        fetched = self.repository.get_by_id(created.id)
        self.assertEqual(fetched.caption, "caption")
        self.assertEqual(fetched.image_url, "/uploads/1.jpg")

    def test_get_by_id_missing(self):
        with self.assertRaises(NotFound):
            self.repository.get_by_id(42)

    def test_list_recent_clamps_limit(self):
        repository = PostRepository(db.session, max_limit=3)
        for i in range(5):
            repository.create(f"post {i}", f"/uploads/{i}.jpg")

        self.assertEqual([p.caption for p in repository.list_recent(10)], ["post 4", "post 3", "post 2"])
        self.assertEqual(len(repository.list_recent(0)), 3)
        self.assertEqual(len(repository.list_recent(2)), 2)

    def test_created_at_falls_back_to_local_clock(self):
        failure = OperationalError("SELECT created_at FROM posts", {}, Exception("connection lost"))
        with mock.patch.object(PostRepository, "_read_created_at", side_effect=failure):
            post = self.repository.create("caption", "/uploads/1.jpg")

        self.assertLess(abs(datetime.now() - post.created_at), timedelta(minutes=1))
        self.assertEqual(post.to_dict()["caption"], "caption")
        self.assertEqual(self._row_count(), 1)

    def test_create_past_deadline_is_rolled_back(self):
        repository = PostRepository(db.session, timeout=-1)
        with self.assertRaises(OperationTimeout):
            repository.create("late", "/uploads/late.jpg")
        self.assertEqual(self._row_count(), 0)

    def test_reads_past_deadline_time_out(self):
        repository = PostRepository(db.session, timeout=-1)
        with self.assertRaises(OperationTimeout):
            repository.list_recent()
        with self.assertRaises(OperationTimeout):
            repository.get_by_id(1)


class PostRepositoryBackendErrorTests(unittest.TestCase):
    def test_query_failure_is_storage_error(self):
        session = mock.Mock()
        session.scalars.side_effect = OperationalError("SELECT", {}, Exception("gone away"))
        with self.assertRaises(StorageError) as ctx:
            PostRepository(session).list_recent()
        self.assertIn("DB query error", ctx.exception.message)

    def test_pool_timeout_is_operation_timeout(self):
        session = mock.Mock()
        session.get.side_effect = PoolTimeoutError("QueuePool limit reached")
        with self.assertRaises(OperationTimeout):
            PostRepository(session).get_by_id(1)

    def test_insert_failure_rolls_back(self):
        session = mock.Mock()
        session.flush.side_effect = OperationalError("INSERT", {}, Exception("read-only"))
        with self.assertRaises(StorageError) as ctx:
            PostRepository(session).create("caption", "/uploads/1.jpg")
        self.assertIn("DB insert error", ctx.exception.message)
        session.rollback.assert_called_once()
        session.commit.assert_not_called()


if __name__ == "__main__":
    unittest.main()
