#!/usr/bin/env python3
# coding: utf-8
"""
O'Reilly book downloader

Downloads books in PDF and/or EPUB format using Docker: the `kirinnee/orly`
image fetches the EPUB, Calibre's `ebook-convert` (local or containerized)
turns it into a PDF. Supports username/password and SSO login and batch
downloads of many books.

Usage:
    python oreilly_downloader.py -b <BOOK ID> -t <TITLE> -f pdf|epub|both [options]
    python oreilly_downloader.py -l books.txt -f pdf -m sso -c cookies.json

See `--help` for details.
"""

import sys

from orly_batch.app import main

if __name__ == "__main__":
    sys.exit(main())
