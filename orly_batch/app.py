import os
import sys
import logging

from orly_batch import config
from orly_batch.batch import BatchCoordinator
from orly_batch.cleanup import CleanupHandler
from orly_batch.cli import build_parser, resolve_config
from orly_batch.conversion import select_converter
from orly_batch.display import Display
from orly_batch.exceptions import ConfigurationError, OreillyDownloaderError
from orly_batch.http_client import HttpClient
from orly_batch.processor import ItemProcessor
from orly_batch.retrieval import Retriever
from orly_batch.runtime import ContainerRuntime
from orly_batch.session import SessionVerifier

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def setup_logger(log_file_path):
    logger = logging.getLogger(config.LOGGER_NAME)
    log_level_int = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    if not isinstance(log_level_int, int):
        print(f"Warning: Invalid LOG_LEVEL '{config.LOG_LEVEL}'. Defaulting to INFO.", file=sys.stderr)
        log_level_int = logging.INFO
    logger.setLevel(log_level_int)
    logger.propagate = False

    file_handler = logging.FileHandler(filename=log_file_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(fmt=config.LOG_FORMAT, datefmt=config.LOG_DATE_FORMAT))
    logger.addHandler(file_handler)
    return logger, file_handler


def run(run_config, display, runtime):
    """Process every item of the run. Returns the process exit code."""
    if not runtime.is_available():
        raise ConfigurationError("Docker is not installed or not in PATH")
    if runtime.is_arm_host():
        display.info("Notice: Running on ARM architecture. Some Docker images may use emulation.\n"
                     "    This is normal and will work, but might be slower than native images.")

    if run_config.verify_session:
        SessionVerifier(HttpClient(), display).verify(run_config.login)

    layout = run_config.layout
    with CleanupHandler(runtime, display, layout) as cleanup:
        retriever = Retriever(runtime, cleanup, display, run_config.login, timeout=run_config.timeout)
        converter = None
        if run_config.book_format.wants_pdf:
            converter = select_converter(runtime, cleanup, display, timeout=run_config.timeout)
        processor = ItemProcessor(retriever, converter, layout, cleanup, display)

        if run_config.batch_mode:
            display.info(f"Running in batch mode with file: {run_config.manifest_path}")
            display.info(f"Selected format: {run_config.book_format.value}")
            display.info(f"Login method: {run_config.login_method.value}")
            summary = BatchCoordinator(processor, display).run(list(run_config.items))
            if run_config.strict and summary.failure_count:
                return EXIT_FAILURE

        else:
            result = processor.process(run_config.items[0])
            if not result.succeeded:
                return EXIT_FAILURE

    display.success("All operations completed!")
    return EXIT_OK


def main(argv=None, workdir=None, runtime=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        run_config = resolve_config(args, workdir=workdir)
    except ConfigurationError as e:
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    log_file_path = os.path.join(
        run_config.layout.root, f"{config.DEFAULT_LOG_FILE_PREFIX}{run_config.run_name}.log"
    )
    logger, file_handler = setup_logger(log_file_path)
    display = Display(logger)

    try:
        return run(run_config, display, runtime or ContainerRuntime())

    except KeyboardInterrupt:
        display.error("Download interrupted by user.")
        display.aborting()
        return EXIT_INTERRUPTED

    except OreillyDownloaderError as e:
        display.error(f"Error: {e}")
        display.aborting()
        return EXIT_FAILURE

    except Exception as e:
        logger.critical("An unexpected error occurred during main execution:", exc_info=True)
        display.error(f"An unexpected critical error occurred: {e}. Check {log_file_path} for details.")
        return EXIT_FAILURE

    finally:
        logger.removeHandler(file_handler)
        file_handler.close()
        if not display.in_error and not run_config.preserve_log and os.path.isfile(log_file_path):
            os.remove(log_file_path)
