"""
Mapping from output titles to container names and file names.

Container names only allow ``[A-Za-z0-9_.-]`` and must begin with an
alphanumeric character, so every container is named
``CONTAINER_NAME_PREFIX + sanitize(title)``.
"""

import re

from orly_batch import config

ALLOWED_NAME_CHARS = "A-Za-z0-9_.-"
_DISALLOWED_RE = re.compile(f"[^{ALLOWED_NAME_CHARS}]")


def sanitize(title):
    return _DISALLOWED_RE.sub("_", title)


def container_name(title):
    return config.CONTAINER_NAME_PREFIX + sanitize(title)


def output_stem(title):
    # Only path separators and NUL are replaced: the title stays readable.
    for ch in ("/", "\\", "\0"):
        title = title.replace(ch, "_")
    if title in (".", ".."):
        title = title.replace(".", "_")
    return title
