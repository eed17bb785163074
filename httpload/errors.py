# httpload/errors.py


class HttpLoadError(Exception):
    """Base class for errors that abort a whole test run."""


class ConfigError(HttpLoadError):
    """Config or data file could not be read or is invalid."""


class OutputFileError(HttpLoadError):
    """Output file could not be created."""
