"""Exceptions raised by the classification core."""


class ClassifierError(Exception):
    """Base class for classifier errors."""


class RegistryLoadError(ClassifierError):
    """Signal tables could not be built; the process must not serve requests."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class ClassificationTimeout(ClassifierError):
    """Classification did not finish within the caller's deadline."""
