# config.py

# URLs
ORLY_BASE_HOST = "oreilly.com"
LEARNING_BASE_HOST = f"learning.{ORLY_BASE_HOST}"

LEARNING_BASE_URL = f"https://{LEARNING_BASE_HOST}"
PROFILE_URL = f"{LEARNING_BASE_URL}/profile/"

# Paths (relative to the working directory)
DEFAULT_CREDENTIALS_FILE = "data/user.conf"
DEFAULT_OUTPUT_DIR = "download"
PDF_DIR_NAME = "pdf"
EPUB_DIR_NAME = "epub"
TEMP_DIR_NAME = "tmp"
DEFAULT_LOG_FILE_PREFIX = "info_"

# Container runtime
DOCKER_EXECUTABLE = "docker"
DOWNLOADER_IMAGE = "kirinnee/orly:latest"
CONVERTER_IMAGE = "rappdw/ebook-convert:latest"
CONVERTER_CONTAINER_NAME = "calibre-converter"  # fixed, hence items never run in parallel
CONTAINER_NAME_PREFIX = "orly-"
CONTAINER_DATA_DIR = "/data"

# Conversion
MAC_CALIBRE_CONVERT = "/Applications/calibre.app/Contents/MacOS/ebook-convert"
CALIBRE_CONVERT_EXECUTABLE = "ebook-convert"
CONVERSION_FLAGS = ("--pdf-page-numbers", "--pretty-print")
FAILED_CONVERSION_NOTE = "PDF conversion failed - please use the EPUB version"

# Settings
DEFAULT_TIMEOUT = 3600  # seconds, per external tool invocation
ARM_MACHINES = ("arm64", "aarch64")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/90.0.4430.212 Safari/537.36"
)

DEFAULT_REQUEST_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Upgrade-Insecure-Requests": "1",
    "User-Agent": DEFAULT_USER_AGENT,
    "Referer": LEARNING_BASE_URL + "/home/"
}

# Logging Configuration
LOGGER_NAME = "OreillyDownloader"
LOG_LEVEL = "INFO"
LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
LOG_DATE_FORMAT = "%d/%b/%Y %H:%M:%S"
