import os

from orly_batch.exceptions import ConfigurationError
from orly_batch.models import Credentials, SessionCookies


def load_credentials(config_file_path):
    """
    Read the two-line credentials file: username on the first line,
    password on the second.
    """
    if not os.path.isfile(config_file_path):
        raise ConfigurationError(
            f"Configuration file not found at {config_file_path}\n"
            "    Please create a file at this location with your O'Reilly credentials\n"
            "    Format: first line username, second line password"
        )
    try:
        with open(config_file_path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Configuration file {config_file_path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Unable to read configuration file {config_file_path}: {e}") from e

    if len(lines) != 2:
        raise ConfigurationError(
            "Configuration file should contain exactly 2 lines (username and password)"
        )

    username, password = lines
    if not username.strip() or not password:
        raise ConfigurationError(f"Username or password cannot be empty in {config_file_path}")

    return Credentials(username=username.strip(), password=password)


def load_session_cookies(cookie_file_path):
    if not cookie_file_path:
        raise ConfigurationError("SSO login requires a cookie file specified with -c")
    if not os.path.isfile(cookie_file_path):
        raise ConfigurationError(f"Cookie file '{cookie_file_path}' not found")
    try:
        with open(cookie_file_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ConfigurationError(f"Unable to read cookie file '{cookie_file_path}': {e}") from e

    return SessionCookies(path=cookie_file_path, data=data)
