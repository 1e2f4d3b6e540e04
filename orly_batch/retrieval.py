import os
import subprocess

from orly_batch import config
from orly_batch.exceptions import ContainerRuntimeError, RetrievalError
from orly_batch.models import SessionCookies
from orly_batch.naming import container_name
from orly_batch.runtime import stderr_text


class Retriever:
    """
    Drives the download tool container. The EPUB arrives on the container's
    stdout and is written straight into the item's temp file.
    """

    def __init__(self, runtime, cleanup, display, login, timeout=None, image=config.DOWNLOADER_IMAGE):
        self.runtime = runtime
        self.cleanup = cleanup
        self.display = display
        self.login = login  # Credentials or SessionCookies
        self.timeout = timeout
        self.image = image

    @property
    def uses_sso(self):
        return isinstance(self.login, SessionCookies)

    def build_command(self, item, name):
        """Returns the docker arguments and the bytes to feed on stdin."""
        if self.uses_sso:
            return ["run", "--name", name, "-i", self.image, "sso", item.identifier], self.login.data

        return [
            "run", "--name", name, self.image,
            "login", item.identifier, f"{self.login.username}:{self.login.password}"
        ], None

    def retrieve(self, item, epub_path):
        if not item.identifier:
            raise RetrievalError(f"Missing book identifier for '{item.output_title}'")

        name = container_name(item.output_title)
        args, stdin_data = self.build_command(item, name)

        self.display.info("Starting download with %s authentication..." %
                          ("SSO" if self.uses_sso else "username/password"))
        self.display.log(f"Download container '{name}' for '{item.identifier}' -> {epub_path}")
        try:
            with self.cleanup.container(name):
                with open(epub_path, "wb") as epub_file:
                    result = self.runtime.run(args, input=stdin_data, stdout=epub_file, timeout=self.timeout)

        except subprocess.TimeoutExpired:
            raise RetrievalError(
                f"Download of '{item.identifier}' timed out after {self.timeout} seconds"
            ) from None

        except (ContainerRuntimeError, OSError) as e:
            raise RetrievalError(f"Unable to run the download tool for '{item.identifier}': {e}") from e

        if result.returncode != 0:
            raise RetrievalError(
                f"Download tool exited with status {result.returncode} for '{item.identifier}': "
                f"{stderr_text(result)}"
            )

        if not os.path.isfile(epub_path) or os.path.getsize(epub_path) == 0:
            raise RetrievalError(f"Download failed or resulted in empty file for '{item.identifier}'")

        self.display.success("Download completed successfully!")
        return epub_path
