import os
import signal
import subprocess
from contextlib import contextmanager

from orly_batch import config
from orly_batch.exceptions import CleanupWarning, ContainerRuntimeError
from orly_batch.naming import container_name


class CleanupHandler:
    """
    Owns every transient resource of a run: named containers and the temp files
    of the title being processed.

    Containers are acquired with `container(name)` and always released when the
    block exits, whatever the exit path. Used as a context manager, the handler
    also turns SIGTERM into a KeyboardInterrupt so termination unwinds through
    the same blocks, and calls `release_all()` on the way out.

    Release is best-effort: failures are logged as warnings and never raised.
    """

    def __init__(self, runtime, display, layout):
        self.runtime = runtime
        self.display = display
        self.layout = layout
        self.active = []
        self.current_title = None
        self.warnings = []
        self._previous_sigterm = None

    def __enter__(self):
        self.install_signal_handlers()
        return self

    def __exit__(self, exc_type, exc_value, tb):
        try:
            self.release_all()
        finally:
            self.restore_signal_handlers()
        return False

    def install_signal_handlers(self):
        self._previous_sigterm = signal.signal(signal.SIGTERM, self._on_terminate)

    def restore_signal_handlers(self):
        if self._previous_sigterm is not None:
            signal.signal(signal.SIGTERM, self._previous_sigterm)
            self._previous_sigterm = None

    @staticmethod
    def _on_terminate(signum, frame):
        raise KeyboardInterrupt(f"Terminated by signal {signum}")

    def track(self, title):
        self.current_title = title

    @contextmanager
    def container(self, name):
        # A leftover container from an earlier run would make `docker run --name` fail.
        self.release(name)
        self.active.append(name)
        try:
            yield name
        finally:
            self.release(name)

    def release(self, name):
        try:
            if self.runtime.container_exists(name):
                self.display.log(f"Removing container '{name}'")
                self.runtime.remove_container(name)
        except (ContainerRuntimeError, subprocess.SubprocessError, OSError) as e:
            self._warn(CleanupWarning(f"Failed to remove container '{name}': {e}"))
        finally:
            while name in self.active:
                self.active.remove(name)

    def remove_file(self, path):
        try:
            if os.path.isfile(path):
                os.remove(path)
                self.display.log(f"Removed transient file '{path}'")
        except OSError as e:
            self._warn(CleanupWarning(f"Failed to remove '{path}': {e}"))

    def release_all(self):
        names = list(self.active)
        if self.current_title is not None:
            names.append(container_name(self.current_title))
        names.append(config.CONVERTER_CONTAINER_NAME)

        for name in dict.fromkeys(names):
            self.release(name)

        if self.current_title is not None:
            self.remove_file(self.layout.temp_epub(self.current_title))
            self.remove_file(self.layout.temp_pdf(self.current_title))

    def _warn(self, warning):
        self.warnings.append(warning)
        self.display.warning(str(warning))
