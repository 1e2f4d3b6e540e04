import os
import shutil

from orly_batch import config
from orly_batch.exceptions import ConversionError, FileOperationError, RetrievalError
from orly_batch.models import Outcome, ProcessingResult


class ItemProcessor:
    """
    Takes one Item from retrieval to placed artifacts.

    Only a retrieval failure fails the item. A conversion failure forces the
    EPUB to be kept for that item and leaves a note next to where the PDF
    would have been.
    """

    def __init__(self, retriever, converter, layout, cleanup, display):
        self.retriever = retriever
        self.converter = converter
        self.layout = layout
        self.cleanup = cleanup
        self.display = display

    def process(self, item):
        self.cleanup.track(item.output_title)
        self.display.item_header(item)

        temp_epub = self.layout.temp_epub(item.output_title)
        try:
            self.retriever.retrieve(item, temp_epub)
        except RetrievalError as e:
            self.display.error(f"Error: {e}")
            self.cleanup.remove_file(temp_epub)
            return ProcessingResult(item=item, outcome=Outcome.FAILURE, error=str(e))

        artifacts = []
        note_path = None
        keep_epub = item.format.wants_epub

        if item.format.wants_pdf:
            try:
                artifacts.append(self.convert(item, temp_epub))
            except ConversionError as e:
                self.display.error(f"Error: {e}")
                self.display.info("Keeping EPUB file instead.")
                keep_epub = True
                note_path = self.write_failure_note(item)
                self.cleanup.remove_file(self.layout.temp_pdf(item.output_title))

        if keep_epub:
            epub_path = self.layout.epub_path(item.output_title)
            try:
                self._move(temp_epub, epub_path)
            except FileOperationError as e:
                self.display.error(f"Error: {e}")
                self.cleanup.remove_file(temp_epub)
                return ProcessingResult(item=item, outcome=Outcome.FAILURE, error=str(e))
            self.display.info(f"EPUB saved to: {epub_path}")
            artifacts.append(epub_path)
        else:
            self.cleanup.remove_file(temp_epub)

        self.display.success(f"Book '{item.identifier}' downloaded successfully as '{item.output_title}'!")
        return ProcessingResult(
            item=item,
            outcome=Outcome.SUCCESS,
            artifact_paths=frozenset(artifacts),
            note_path=note_path
        )

    def convert(self, item, temp_epub):
        self.display.info("Converting to PDF format...")
        temp_pdf = self.layout.temp_pdf(item.output_title)
        self.converter.convert(temp_epub, temp_pdf)

        pdf_path = self.layout.pdf_path(item.output_title)
        try:
            self._move(temp_pdf, pdf_path)
        except FileOperationError as e:
            raise ConversionError(str(e)) from e
        self.display.info(f"PDF saved to: {pdf_path}")
        return pdf_path

    def write_failure_note(self, item):
        note_path = self.layout.note_path(item.output_title)
        try:
            os.makedirs(self.layout.pdf_dir, exist_ok=True)
            with open(note_path, "w", encoding="utf-8") as f:
                f.write(config.FAILED_CONVERSION_NOTE + "\n")
                f.write(f"EPUB file location: {self.layout.epub_path(item.output_title)}\n")
        except OSError as e:
            self.display.warning(f"Unable to write conversion note {note_path}: {e}")
            return None
        return note_path

    @staticmethod
    def _move(source, destination):
        try:
            shutil.move(source, destination)
        except (OSError, shutil.Error) as e:
            raise FileOperationError(f"Unable to move '{source}' to '{destination}': {e}") from e
