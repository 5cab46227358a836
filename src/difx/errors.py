"""Exceptions raised while explaining a diff."""


class DifxError(Exception):
    """Base exception for all difx failures."""


class ConfigError(DifxError):
    """Raised when the config file cannot be read, decoded or written."""


class DiffSourceError(DifxError):
    """Raised when the git diff command fails."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        if stderr:
            message = f"{message}\n{stderr.rstrip()}"
        super().__init__(message)


class TransportError(DifxError):
    """Raised when the provider cannot be reached."""


class ProviderError(DifxError):
    """Raised when the provider answers with a non-success status."""

    def __init__(self, provider: str, status: int, body: str):
        self.provider = provider
        self.status = status
        self.body = body
        super().__init__(f"{provider} API returned status {status}: {body}")


class DecodeError(DifxError):
    """Raised when a response or stream payload is not valid JSON."""

    def __init__(self, message: str, fragment: str = ""):
        self.fragment = fragment
        if fragment:
            message = f"{message}: {fragment}"
        super().__init__(message)
