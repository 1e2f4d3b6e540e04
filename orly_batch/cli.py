import os
import argparse
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from orly_batch import config
from orly_batch.credentials import load_credentials, load_session_cookies
from orly_batch.exceptions import ConfigurationError
from orly_batch.manifest import load_manifest
from orly_batch.models import Credentials, Format, Item, LoginMethod, OutputLayout, SessionCookies
from orly_batch.naming import sanitize

EXAMPLES = """
Examples:
  Single book download with username/password:
    %(prog)s -b 9780321635754 -t "Art of Computer Programming" -f pdf

  Single book download with SSO:
    %(prog)s -b 9780321635754 -t "Art of Computer Programming" -f pdf -m sso -c cookies.json

  Batch download multiple books:
    %(prog)s -l books.txt -f pdf -m sso -c cookies.json

Batch file format (books.txt):
  9780321635754,Art of Computer Programming
  9781788298025,Mastering Kubernetes
  <book_id_or_title>,<output_filename>
"""


@dataclass(frozen=True)
class RunConfig:
    items: Tuple[Item, ...]
    batch_mode: bool
    book_format: Format
    login_method: LoginMethod
    login: Union[Credentials, SessionCookies]
    layout: OutputLayout
    run_name: str
    manifest_path: Optional[str] = None
    timeout: Optional[float] = None
    verify_session: bool = False
    preserve_log: bool = False
    strict: bool = False


def build_parser():
    arguments = argparse.ArgumentParser(
        prog="oreilly_downloader.py",
        description="Download O'Reilly books as PDF and/or EPUB using Docker.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False
    )
    arguments.add_argument("-b", "--book", metavar="<book_title>", default="",
                           help="The O'Reilly book ID or link to download.")
    arguments.add_argument("-t", "--title", metavar="<output_filename>", default="",
                           help="Output filename (without extension).")
    arguments.add_argument("-l", "--list", dest="batch_file", metavar="<batch_file>", default="",
                           help="File containing list of books to download (one per line: ID,Title).")
    arguments.add_argument("-f", "--format", metavar="<format>", default="",
                           help="Format to download: pdf, epub, or both.")
    arguments.add_argument("-m", "--login-method", dest="login_method", metavar="<login_method>",
                           default=LoginMethod.USER.value,
                           help="Login method: user (default) or sso.")
    arguments.add_argument("-c", "--cookies", dest="cookie_file", metavar="<cookie_file>", default="",
                           help="JSON file with cookies for SSO login (required with -m sso).")
    arguments.add_argument("-o", "--output-dir", dest="output_dir", metavar="<dir>",
                           default=config.DEFAULT_OUTPUT_DIR,
                           help=f"Output root directory (default: {config.DEFAULT_OUTPUT_DIR}).")
    arguments.add_argument("--timeout", type=float, default=config.DEFAULT_TIMEOUT,
                           help="Seconds to wait for each download or conversion before giving up,"
                                f" 0 waits forever (default: {config.DEFAULT_TIMEOUT}).")
    arguments.add_argument("--verify-session", dest="verify_session", action="store_true",
                           help="Check that the SSO cookies open a valid session before downloading.")
    arguments.add_argument("--preserve-log", dest="preserve_log", action="store_true",
                           help="Leave the `info_XXXX.log` file even if there isn't any error.")
    arguments.add_argument("--strict", action="store_true",
                           help="Exit with status 1 when any book of a batch fails.")
    arguments.add_argument("-h", "--help", action="help", default=argparse.SUPPRESS,
                           help="Display this help message.")
    return arguments


def resolve_config(args, workdir=None):
    """
    Validate the parsed arguments and load the credential material.
    Raises ConfigurationError before anything is downloaded.
    """
    workdir = workdir or os.getcwd()

    if not args.format:
        raise ConfigurationError("Missing required format (-f) argument")

    book = args.book.strip()
    title = args.title.strip()
    batch_mode = bool(args.batch_file)
    if batch_mode and (book or title):
        raise ConfigurationError("Use either a batch file (-l) or a single book (-b and -t), not both")
    if not batch_mode and (not book or not title):
        raise ConfigurationError("In single book mode, both book title (-b) and output filename (-t) are required")

    book_format = Format.parse(args.format)
    login_method = LoginMethod.parse(args.login_method)

    if args.verify_session and login_method is not LoginMethod.SSO:
        raise ConfigurationError("`--verify-session` is valid only with the sso login method")
    if args.timeout < 0:
        raise ConfigurationError("Timeout must be zero or greater")

    if login_method is LoginMethod.SSO:
        login = load_session_cookies(_resolve(workdir, args.cookie_file) if args.cookie_file else "")
    else:
        login = None

    manifest_path = None
    if batch_mode:
        manifest_path = _resolve(workdir, args.batch_file)
        items = tuple(load_manifest(manifest_path, book_format))
        run_name = os.path.splitext(os.path.basename(manifest_path))[0]
    else:
        items = (Item(identifier=book, output_title=title, format=book_format),)
        run_name = book

    layout = OutputLayout(root=_resolve(workdir, args.output_dir))
    if os.path.exists(layout.root) and not os.path.isdir(layout.root):
        raise ConfigurationError(f"Output path exists and is not a directory: {layout.root}")
    layout.ensure()

    if login is None:
        login = load_credentials(os.path.join(workdir, config.DEFAULT_CREDENTIALS_FILE))

    return RunConfig(
        items=items,
        batch_mode=batch_mode,
        book_format=book_format,
        login_method=login_method,
        login=login,
        layout=layout,
        run_name=sanitize(run_name),
        manifest_path=manifest_path,
        timeout=args.timeout or None,
        verify_session=args.verify_session,
        preserve_log=args.preserve_log,
        strict=args.strict
    )


def _resolve(workdir, path):
    return path if os.path.isabs(path) else os.path.join(workdir, path)
