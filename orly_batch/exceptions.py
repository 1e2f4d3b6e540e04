class OreillyDownloaderError(Exception):
    """Base class for all custom errors in this application."""
    pass

class ConfigurationError(OreillyDownloaderError):
    """For bad or missing flags, malformed credentials and missing input files. Aborts the run."""
    pass

class RetrievalError(OreillyDownloaderError):
    """When the download tool exits non-zero, times out or produces an empty EPUB. Fails one item only."""
    pass

class ConversionError(OreillyDownloaderError):
    """When EPUB to PDF conversion fails. Never fatal: the item falls back to EPUB."""
    pass

class CleanupWarning(OreillyDownloaderError):
    """When a transient container or file could not be released. Logged, never raised past the cleanup handler."""
    pass

class ContainerRuntimeError(OreillyDownloaderError):
    """For failures talking to the container runtime itself (missing binary, failed pull)."""
    pass

class NetworkConnectionError(OreillyDownloaderError):
    """For issues like requests.ConnectionError, requests.ConnectTimeout."""
    pass

class HttpRequestError(OreillyDownloaderError):
    """For non-2xx HTTP status codes where an error message might be in the response."""
    def __init__(self, message, status_code=None, response_text=None):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text

class AuthenticationError(OreillyDownloaderError):
    """For session cookies that are rejected or expired."""
    pass

class UserAccountError(AuthenticationError):
    """For specific issues related to user account status (e.g. expired subscription)."""
    pass

class FileOperationError(OreillyDownloaderError):
    """For errors related to file I/O (e.g., cannot create directory, cannot write file)."""
    pass
