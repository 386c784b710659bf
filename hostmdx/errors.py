class HostMdxError(Exception):
    """Base class for errors reported to the operator."""


class ConfigurationError(HostMdxError):
    """Raised before any build starts when paths or port are unusable."""


class BuildError(HostMdxError):
    """Raised when one entry of the input tree cannot be processed.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, source_path, message):
        self.source_path = source_path
        super().__init__(f"{source_path}: {message}")


class ServerError(HostMdxError):
    """Raised when the dev server cannot listen."""
