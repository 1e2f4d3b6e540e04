from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional

from orly_batch import config
from orly_batch.exceptions import ConfigurationError
from orly_batch.naming import output_stem


class Format(Enum):
    PDF = "pdf"
    EPUB = "epub"
    BOTH = "both"

    @classmethod
    def parse(cls, value):
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Invalid format '{value}'. Must be 'pdf', 'epub', or 'both'"
            ) from None

    @property
    def wants_pdf(self):
        return self in (Format.PDF, Format.BOTH)

    @property
    def wants_epub(self):
        return self in (Format.EPUB, Format.BOTH)


class LoginMethod(Enum):
    USER = "user"
    SSO = "sso"

    @classmethod
    def parse(cls, value):
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Invalid login method '{value}'. Must be 'user' or 'sso'"
            ) from None


class Outcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Item:
    identifier: str
    output_title: str
    format: Format


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class SessionCookies:
    """Serialized cookie jar, handed to the download tool untouched."""

    path: str
    data: bytes = field(repr=False)

    def as_dict(self):
        try:
            cookies = json.loads(self.data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cookie file '{self.path}' is not valid JSON: {e}") from e
        if not isinstance(cookies, dict):
            raise ConfigurationError(f"Cookie file '{self.path}' must contain a JSON object")
        return cookies


@dataclass(frozen=True)
class ProcessingResult:
    item: Item
    outcome: Outcome
    artifact_paths: FrozenSet[str] = frozenset()
    note_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self):
        return self.outcome is Outcome.SUCCESS


@dataclass(frozen=True)
class BatchSummary:
    total: int
    success_count: int
    failure_count: int


@dataclass(frozen=True)
class OutputLayout:
    """Where every artifact of an item lives under the output root."""

    root: str

    @property
    def pdf_dir(self):
        return os.path.join(self.root, config.PDF_DIR_NAME)

    @property
    def epub_dir(self):
        return os.path.join(self.root, config.EPUB_DIR_NAME)

    @property
    def temp_dir(self):
        return os.path.join(self.root, config.TEMP_DIR_NAME)

    def ensure(self):
        for path in (self.pdf_dir, self.epub_dir, self.temp_dir):
            try:
                os.makedirs(path, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(f"Unable to create output directory '{path}': {e}") from e

    def temp_epub(self, title):
        return os.path.join(self.temp_dir, output_stem(title) + ".epub")

    def temp_pdf(self, title):
        return os.path.join(self.temp_dir, output_stem(title) + ".pdf")

    def pdf_path(self, title):
        return os.path.join(self.pdf_dir, output_stem(title) + ".pdf")

    def epub_path(self, title):
        return os.path.join(self.epub_dir, output_stem(title) + ".epub")

    def note_path(self, title):
        return os.path.join(self.pdf_dir, output_stem(title) + ".txt")
