import subprocess
import tempfile
import unittest
from unittest.mock import MagicMock

from fakes import FakeRuntime

from orly_batch import config
from orly_batch.cleanup import CleanupHandler
from orly_batch.display import Display
from orly_batch.exceptions import ContainerRuntimeError, RetrievalError
from orly_batch.models import Credentials, Format, Item, OutputLayout, SessionCookies
from orly_batch.naming import container_name
from orly_batch.retrieval import Retriever

ITEM = Item("9780321635754", "Art of Computer Programming", Format.PDF)


class TestRetriever(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.layout = OutputLayout(self.tmp.name)
        self.layout.ensure()
        self.display = MagicMock(spec=Display)
        self.epub_path = self.layout.temp_epub(ITEM.output_title)

    def tearDown(self):
        self.tmp.cleanup()

    def make_retriever(self, runtime, login=None, timeout=None):
        cleanup = CleanupHandler(runtime, self.display, self.layout)
        login = login or Credentials("reader@example.com", "password01")
        return Retriever(runtime, cleanup, self.display, login, timeout=timeout)

    def test_user_login_command(self):
        runtime = FakeRuntime()
        self.make_retriever(runtime).retrieve(ITEM, self.epub_path)

        name = container_name(ITEM.output_title)
        self.assertIn(
            ["run", "--name", name, config.DOWNLOADER_IMAGE,
             "login", "9780321635754", "reader@example.com:password01"],
            runtime.calls
        )

    def test_sso_login_pipes_cookie_file(self):
        received = {}

        def on_run(args, input, stdout):
            if args[0] == "run":
                received["input"] = input
                received["args"] = args

        runtime = FakeRuntime(on_run=on_run)
        cookies = SessionCookies(path="cookies.json", data=b'{"orm-jwt": "token"}')
        self.make_retriever(runtime, login=cookies).retrieve(ITEM, self.epub_path)

        self.assertEqual(received["input"], b'{"orm-jwt": "token"}')
        self.assertEqual(received["args"][-3:], [config.DOWNLOADER_IMAGE, "sso", "9780321635754"])
        self.assertIn("-i", received["args"])

    def test_missing_identifier_fails_without_container(self):
        runtime = FakeRuntime()
        with self.assertRaises(RetrievalError) as cm:
            self.make_retriever(runtime).retrieve(Item("", "Orphan title", Format.PDF), self.epub_path)

        self.assertIn("Missing book identifier", str(cm.exception))
        self.assertEqual(runtime.calls, [])

    def test_epub_is_written_from_stdout(self):
        runtime = FakeRuntime(output=b"PK epub bytes")
        self.make_retriever(runtime).retrieve(ITEM, self.epub_path)

        with open(self.epub_path, "rb") as f:
            self.assertEqual(f.read(), b"PK epub bytes")

    def test_download_container_is_removed(self):
        runtime = FakeRuntime()
        self.make_retriever(runtime).retrieve(ITEM, self.epub_path)

        self.assertIn(container_name(ITEM.output_title), runtime.removed)
        self.assertEqual(runtime.containers, set())

    def test_empty_output_fails(self):
        runtime = FakeRuntime(output=b"")
        with self.assertRaises(RetrievalError) as cm:
            self.make_retriever(runtime).retrieve(ITEM, self.epub_path)
        self.assertIn("empty file", str(cm.exception))
        self.assertEqual(runtime.containers, set())

    def test_non_zero_exit_fails(self):
        runtime = FakeRuntime(returncode=1, stderr=b"book not found")
        with self.assertRaises(RetrievalError) as cm:
            self.make_retriever(runtime).retrieve(ITEM, self.epub_path)
        self.assertIn("book not found", str(cm.exception))

    def test_timeout_fails_and_releases_container(self):
        def on_run(args, input, stdout):
            if args[0] == "run":
                raise subprocess.TimeoutExpired(args, 5)

        runtime = FakeRuntime(on_run=on_run)
        with self.assertRaises(RetrievalError) as cm:
            self.make_retriever(runtime, timeout=5).retrieve(ITEM, self.epub_path)
        self.assertIn("timed out", str(cm.exception))
        self.assertEqual(runtime.containers, set())

    def test_missing_docker_fails(self):
        runtime = FakeRuntime()

        def on_run(args, input, stdout):
            raise ContainerRuntimeError("docker not found")

        runtime.on_run = on_run
        runtime.container_exists = MagicMock(return_value=False)
        with self.assertRaises(RetrievalError):
            self.make_retriever(runtime).retrieve(ITEM, self.epub_path)

    def test_password_never_reaches_the_log(self):
        self.make_retriever(FakeRuntime()).retrieve(ITEM, self.epub_path)

        for call in self.display.log.call_args_list + self.display.info.call_args_list:
            self.assertNotIn("password01", str(call))


if __name__ == '__main__':
    unittest.main()
