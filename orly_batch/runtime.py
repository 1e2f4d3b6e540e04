import platform
import shutil
import subprocess

from orly_batch import config
from orly_batch.exceptions import ContainerRuntimeError


class ContainerRuntime:
    """
    Thin wrapper around the `docker` command line.
    Every call blocks until the docker client exits.
    """

    def __init__(self, executable=config.DOCKER_EXECUTABLE):
        self.executable = executable

    def is_available(self):
        return shutil.which(self.executable) is not None

    @staticmethod
    def is_arm_host():
        return platform.machine().lower() in config.ARM_MACHINES

    def run(self, args, input=None, stdout=subprocess.PIPE, timeout=None):
        """
        Run `docker <args>`. stderr is always captured so it can end up in the log.
        Raises `subprocess.TimeoutExpired` when `timeout` elapses; the docker client is killed by then.
        """
        try:
            return subprocess.run(
                [self.executable] + list(args),
                input=input,
                stdout=stdout,
                stderr=subprocess.PIPE,
                timeout=timeout,
                check=False
            )
        except FileNotFoundError as e:
            raise ContainerRuntimeError(f"Container runtime '{self.executable}' is not installed or not in PATH") from e

    def container_exists(self, name):
        return self.run(["container", "inspect", name], stdout=subprocess.DEVNULL).returncode == 0

    def remove_container(self, name):
        result = self.run(["container", "rm", "-f", name], stdout=subprocess.DEVNULL)
        if result.returncode != 0:
            raise ContainerRuntimeError(
                f"Unable to remove container '{name}': {stderr_text(result)}"
            )

    def image_exists(self, image):
        return self.run(["image", "inspect", image], stdout=subprocess.DEVNULL).returncode == 0

    def pull_image(self, image, timeout=None):
        result = self.run(["pull", image], stdout=subprocess.DEVNULL, timeout=timeout)
        if result.returncode != 0:
            raise ContainerRuntimeError(f"Unable to pull image '{image}': {stderr_text(result)}")


def stderr_text(result):
    if not result.stderr:
        return "no error output"
    return result.stderr.decode("utf-8", "replace").strip()
