import os

from orly_batch.exceptions import ConfigurationError
from orly_batch.models import Item

COMMENT_PREFIX = "#"
FIELD_SEPARATOR = ","


def parse_manifest_lines(lines, book_format):
    """
    Turn `identifier,title` lines into Items.
    Blank lines and `#` comments are skipped, the title defaults to the identifier.
    A line without an identifier is kept so it fails on its own when processed.
    """
    items = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        identifier, _, title = line.partition(FIELD_SEPARATOR)
        identifier = identifier.strip()
        title = title.strip()
        items.append(Item(identifier=identifier, output_title=title or identifier, format=book_format))

    return items


def load_manifest(manifest_path, book_format):
    if not os.path.isfile(manifest_path):
        raise ConfigurationError(f"Batch file '{manifest_path}' not found")
    try:
        with open(manifest_path, "r", encoding="utf-8-sig") as f:
            return parse_manifest_lines(f.read().splitlines(), book_format)
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Batch file '{manifest_path}' is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Unable to read batch file '{manifest_path}': {e}") from e
