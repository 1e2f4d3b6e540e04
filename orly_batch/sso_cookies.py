"""
Turns the cookie string of a logged-in browser session into the JSON cookie
file expected by `oreilly_downloader.py -m sso -c <file>`.
"""

import json
import argparse
import sys

from orly_batch.exceptions import FileOperationError, OreillyDownloaderError

DEFAULT_COOKIES_FILENAME = "cookies.json"


def parse_cookie_string(cookies_string):
    cookies = {}
    for cookie in cookies_string.strip().split(";"):
        cookie = cookie.strip()
        if not cookie:
            continue
        if "=" not in cookie:
            raise OreillyDownloaderError(f"Invalid cookie string part: '{cookie}'. Expected 'key=value'.")
        key, value = cookie.split("=", 1)
        cookies[key.strip()] = value
    if not cookies:
        raise OreillyDownloaderError("The cookie string is empty.")
    return cookies


def transform(cookies_string, output_file_path):
    cookies = parse_cookie_string(cookies_string)
    try:
        with open(output_file_path, "w") as f:
            json.dump(cookies, f)
    except OSError as e:
        raise FileOperationError(f"Error saving cookie file to {output_file_path}: {e}") from e

    return cookies


USAGE_INFO = """
To get your cookie string:
1. Log in to O'Reilly Learning (learning.oreilly.com) in your web browser.
2. Open your browser's developer tools (usually F12).
3. Go to the "Console" tab.
4. Type `document.cookie` and press Enter.
5. Copy the entire string output.
"""


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="orly-cookies",
        description="Transform a browser cookie string into a cookie file for SSO downloads.",
        epilog=USAGE_INFO,
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument(
        "cookies_string",
        help="The cookie string copied from your browser's developer console."
    )
    parser.add_argument(
        "-o", "--output-file",
        dest="output_file",
        default=DEFAULT_COOKIES_FILENAME,
        help=f"Path of the cookie file to write. Defaults to: {DEFAULT_COOKIES_FILENAME}"
    )
    args = parser.parse_args(argv)

    try:
        cookies = transform(args.cookies_string, args.output_file)
    except OreillyDownloaderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Saved {len(cookies)} cookies into `{args.output_file}`.\n"
          f"Now you can run: oreilly_downloader.py -m sso -c {args.output_file} ...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
