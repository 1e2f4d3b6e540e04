"""
EPUB to PDF conversion strategies.

Two interchangeable strategies share one contract: `convert(epub_path, pdf_path)`
either leaves a PDF at `pdf_path` or raises `ConversionError`. Exactly one
strategy is chosen per run by `select_converter()`; a failed attempt is not
retried.
"""

import os
import platform
import shutil
import subprocess

from orly_batch import config
from orly_batch.exceptions import ContainerRuntimeError, ConversionError
from orly_batch.runtime import stderr_text


def find_local_converter():
    executable = shutil.which(config.CALIBRE_CONVERT_EXECUTABLE)
    if executable:
        return executable

    if platform.system() == "Darwin" and os.access(config.MAC_CALIBRE_CONVERT, os.X_OK):
        return config.MAC_CALIBRE_CONVERT

    return None


def _check_output(pdf_path):
    if not os.path.isfile(pdf_path):
        raise ConversionError("PDF file was not created")


class LocalCalibreConverter:
    description = "local Calibre installation"

    def __init__(self, executable, display, timeout=None):
        self.executable = executable
        self.display = display
        self.timeout = timeout

    def convert(self, epub_path, pdf_path):
        self.display.info(f"Using {self.description} for conversion...")
        try:
            result = subprocess.run(
                [self.executable, epub_path, pdf_path] + list(config.CONVERSION_FLAGS),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False
            )
        except subprocess.TimeoutExpired:
            raise ConversionError(f"Conversion timed out after {self.timeout} seconds") from None
        except OSError as e:
            raise ConversionError(f"Unable to run '{self.executable}': {e}") from e

        if result.returncode != 0:
            raise ConversionError(
                f"Failed to convert EPUB to PDF using {self.description}: {stderr_text(result)}"
            )

        _check_output(pdf_path)
        return pdf_path


class ContainerCalibreConverter:
    """
    Runs `ebook-convert` inside a container with the temp directory mounted
    at /data. The container name is fixed, so two conversions must never overlap.
    """

    description = "Docker"

    def __init__(self, runtime, cleanup, display, timeout=None,
                 image=config.CONVERTER_IMAGE, name=config.CONVERTER_CONTAINER_NAME):
        self.runtime = runtime
        self.cleanup = cleanup
        self.display = display
        self.timeout = timeout
        self.image = image
        self.name = name

    def ensure_image(self):
        if not self.runtime.image_exists(self.image):
            self.display.info("Pulling ebook-convert Docker image...")
            self.runtime.pull_image(self.image, timeout=self.timeout)

    def build_command(self, epub_path, pdf_path):
        data_dir = os.path.dirname(os.path.abspath(epub_path))
        return [
            "run", "--rm",
            "--name", self.name,
            "-v", f"{data_dir}:{config.CONTAINER_DATA_DIR}",
            self.image,
            "ebook-convert",
            f"{config.CONTAINER_DATA_DIR}/{os.path.basename(epub_path)}",
            f"{config.CONTAINER_DATA_DIR}/{os.path.basename(pdf_path)}",
        ] + list(config.CONVERSION_FLAGS)

    def convert(self, epub_path, pdf_path):
        if os.path.dirname(os.path.abspath(epub_path)) != os.path.dirname(os.path.abspath(pdf_path)):
            raise ConversionError("EPUB and PDF must share a directory for containerized conversion")

        try:
            self.ensure_image()
            self.display.info(f"Running conversion with {self.image}...")
            with self.cleanup.container(self.name):
                result = self.runtime.run(self.build_command(epub_path, pdf_path), timeout=self.timeout)

        except subprocess.TimeoutExpired:
            raise ConversionError(f"Conversion timed out after {self.timeout} seconds") from None
        except ContainerRuntimeError as e:
            raise ConversionError(str(e)) from e
        except OSError as e:
            raise ConversionError(f"Unable to run the conversion container: {e}") from e

        if result.returncode != 0:
            raise ConversionError(
                f"Failed to convert EPUB to PDF using {self.description}: {stderr_text(result)}"
            )

        _check_output(pdf_path)
        return pdf_path


def select_converter(runtime, cleanup, display, timeout=None):
    executable = find_local_converter()
    if executable:
        return LocalCalibreConverter(executable, display, timeout=timeout)

    display.info("Local Calibre not found, using Docker for conversion...")
    return ContainerCalibreConverter(runtime, cleanup, display, timeout=timeout)
