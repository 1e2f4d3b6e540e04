import sys
import shutil
import logging


class Display:
    """
    Handles all user-facing output for the downloader.
    Every console message is mirrored to the run logger; `in_error` records
    whether anything went wrong so the caller can decide to keep the log file.
    """

    SH_DEFAULT = "\033[0m" if "win" not in sys.platform else ""
    SH_YELLOW = "\033[33m" if "win" not in sys.platform else ""
    SH_GREEN = "\033[32m" if "win" not in sys.platform else ""
    SH_BG_RED = "\033[41m" if "win" not in sys.platform else ""
    SH_BG_YELLOW = "\033[43m" if "win" not in sys.platform else ""

    def __init__(self, logger, stream=None):
        self.logger = logger
        self.stream = stream if stream is not None else sys.stdout
        self.columns, _ = shutil.get_terminal_size()
        self.in_error = False

        self.logger.info("** Welcome to the O'Reilly downloader! **")

    def log(self, message, level=logging.INFO):
        self.logger.log(level, message)

    def out(self, put):
        pattern = "\r{!s}\r{!s}\n"
        self.stream.write(pattern.format(" " * self.columns, put))
        self.stream.flush()

    def info(self, message, state=False):
        self.logger.info(message)
        output = (self.SH_YELLOW + "[*]" + self.SH_DEFAULT if not state else
                  self.SH_BG_YELLOW + "[-]" + self.SH_DEFAULT) + f" {message}"
        self.out(output)

    def success(self, message):
        self.logger.info(message)
        self.out(self.SH_GREEN + "[+]" + self.SH_DEFAULT + f" {message}")

    def warning(self, message):
        self.logger.warning(message)
        self.out(self.SH_YELLOW + "[!]" + self.SH_DEFAULT + f" Warning: {message}")

    def error(self, error_message):
        self.in_error = True
        self.logger.error(error_message)
        output = self.SH_BG_RED + "[#]" + self.SH_DEFAULT + f" {error_message}"
        self.out(output)

    def item_header(self, item):
        rule = "=" * min(self.columns, 57)
        self.out(rule)
        self.info(f"Downloading book: {item.identifier}")
        self.info(f"Output title: {item.output_title}")
        self.info(f"Format: {item.format.value}")
        self.out(rule)

    def progress(self, done, total):
        self.info(f"Progress: {done}/{total} completed")
        self.out("-" * min(self.columns, 61))

    def summary(self, summary):
        self.info("Batch download complete!")
        self.info(f"Successfully downloaded: {summary.success_count}", state=True)
        self.info(f"Failed: {summary.failure_count}", state=True)
        self.info(f"Total: {summary.total}", state=True)

    def aborting(self):
        self.out(self.SH_BG_RED + "[!]" + self.SH_DEFAULT + " Aborting...")
