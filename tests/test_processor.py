import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from fakes import FakeRuntime

from orly_batch import config
from orly_batch.cleanup import CleanupHandler
from orly_batch.conversion import LocalCalibreConverter
from orly_batch.display import Display
from orly_batch.exceptions import ConversionError, RetrievalError
from orly_batch.models import Credentials, Format, Item, OutputLayout, Outcome
from orly_batch.processor import ItemProcessor
from orly_batch.retrieval import Retriever


def write_epub(item, path):
    with open(path, "wb") as f:
        f.write(b"PK epub")
    return path


def write_pdf(epub_path, pdf_path):
    with open(pdf_path, "wb") as f:
        f.write(b"%PDF-1.4")
    return pdf_path


class TestItemProcessor(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.layout = OutputLayout(self.tmp.name)
        self.layout.ensure()
        self.display = MagicMock(spec=Display)
        self.cleanup = CleanupHandler(FakeRuntime(), self.display, self.layout)

        self.retriever = MagicMock(spec=Retriever)
        self.retriever.retrieve.side_effect = write_epub
        self.converter = MagicMock(spec=LocalCalibreConverter)
        self.converter.convert.side_effect = write_pdf

        self.processor = ItemProcessor(self.retriever, self.converter, self.layout, self.cleanup, self.display)

    def tearDown(self):
        self.tmp.cleanup()

    def item(self, book_format, title="Art of Computer Programming"):
        return Item("9780321635754", title, book_format)

    def test_pdf_success_keeps_only_pdf(self):
        item = self.item(Format.PDF)
        result = self.processor.process(item)

        self.assertIs(result.outcome, Outcome.SUCCESS)
        self.assertEqual(result.artifact_paths, frozenset([self.layout.pdf_path(item.output_title)]))
        self.assertTrue(os.path.isfile(self.layout.pdf_path(item.output_title)))
        self.assertFalse(os.path.exists(self.layout.temp_epub(item.output_title)))
        self.assertFalse(os.path.exists(self.layout.temp_pdf(item.output_title)))
        self.assertFalse(os.path.exists(self.layout.epub_path(item.output_title)))
        self.assertIsNone(result.note_path)

    def test_epub_only_skips_conversion(self):
        item = self.item(Format.EPUB)
        result = self.processor.process(item)

        self.converter.convert.assert_not_called()
        self.assertEqual(result.artifact_paths, frozenset([self.layout.epub_path(item.output_title)]))
        self.assertTrue(os.path.isfile(self.layout.epub_path(item.output_title)))

    def test_both_success_keeps_both(self):
        item = self.item(Format.BOTH)
        result = self.processor.process(item)

        self.assertEqual(result.artifact_paths, frozenset([
            self.layout.pdf_path(item.output_title),
            self.layout.epub_path(item.output_title)
        ]))

    def test_both_with_failed_conversion_falls_back_to_epub(self):
        self.converter.convert.side_effect = ConversionError("Failed to convert EPUB to PDF")
        item = self.item(Format.BOTH)
        result = self.processor.process(item)

        self.assertIs(result.outcome, Outcome.SUCCESS)
        self.assertEqual(result.artifact_paths, frozenset([self.layout.epub_path(item.output_title)]))
        self.assertEqual(result.note_path, self.layout.note_path(item.output_title))
        with open(result.note_path, encoding="utf-8") as f:
            note = f.read()
        self.assertIn(config.FAILED_CONVERSION_NOTE, note)
        self.assertIn(self.layout.epub_path(item.output_title), note)

    def test_pdf_with_failed_conversion_forces_epub(self):
        self.converter.convert.side_effect = ConversionError("boom")
        item = self.item(Format.PDF)
        result = self.processor.process(item)

        self.assertIs(result.outcome, Outcome.SUCCESS)
        self.assertEqual(result.artifact_paths, frozenset([self.layout.epub_path(item.output_title)]))
        self.assertTrue(os.path.isfile(self.layout.note_path(item.output_title)))

    def test_conversion_without_output_falls_back(self):
        self.converter.convert.side_effect = None
        self.converter.convert.return_value = None
        item = self.item(Format.PDF)
        result = self.processor.process(item)

        self.assertIs(result.outcome, Outcome.SUCCESS)
        self.assertEqual(result.artifact_paths, frozenset([self.layout.epub_path(item.output_title)]))
        self.assertIsNotNone(result.note_path)

    def test_forced_epub_does_not_leak_into_next_item(self):
        def fail_first(epub_path, pdf_path):
            if self.converter.convert.call_count == 1:
                raise ConversionError("boom")
            return write_pdf(epub_path, pdf_path)

        self.converter.convert.side_effect = fail_first
        self.processor.process(self.item(Format.PDF, title="First"))
        result = self.processor.process(self.item(Format.PDF, title="Second"))

        self.assertEqual(result.artifact_paths, frozenset([self.layout.pdf_path("Second")]))
        self.assertFalse(os.path.exists(self.layout.epub_path("Second")))

    def test_retrieval_failure_fails_item(self):
        self.retriever.retrieve.side_effect = RetrievalError("Download failed")
        result = self.processor.process(self.item(Format.BOTH))

        self.assertIs(result.outcome, Outcome.FAILURE)
        self.assertEqual(result.artifact_paths, frozenset())
        self.assertEqual(result.error, "Download failed")
        self.converter.convert.assert_not_called()
        self.display.error.assert_called()

    def test_empty_download_fails_without_conversion(self):
        runtime = FakeRuntime(output=b"")
        cleanup = CleanupHandler(runtime, self.display, self.layout)
        retriever = Retriever(runtime, cleanup, self.display, Credentials("reader@example.com", "pw"))
        processor = ItemProcessor(retriever, self.converter, self.layout, cleanup, self.display)

        item = self.item(Format.PDF)
        result = processor.process(item)

        self.assertIs(result.outcome, Outcome.FAILURE)
        self.converter.convert.assert_not_called()
        self.assertFalse(os.path.exists(self.layout.temp_epub(item.output_title)))

    @patch('orly_batch.processor.shutil.move', side_effect=OSError(28, "No space left on device"))
    def test_failed_epub_placement_removes_temp_file(self, _):
        item = self.item(Format.EPUB)
        result = self.processor.process(item)

        self.assertIs(result.outcome, Outcome.FAILURE)
        self.assertIn("No space left on device", result.error)
        self.assertFalse(os.path.exists(self.layout.temp_epub(item.output_title)))

    def test_current_title_is_tracked(self):
        self.processor.process(self.item(Format.EPUB, title="Tracked"))
        self.assertEqual(self.cleanup.current_title, "Tracked")


if __name__ == '__main__':
    unittest.main()
