"""Exceptions raised by filesense.

Conditions met while reading a single input (missing file, permission
problems, undecodable bytes) are never raised: they become result labels.
Only failures that leave a pipeline unusable surface as exceptions.
"""


class FileSenseError(Exception):
    """Base class for all filesense errors."""


class ModelLoadError(FileSenseError):
    """The inference engine or its configuration could not be loaded."""


class InferenceError(FileSenseError):
    """The inference engine failed to run, or was used after being closed."""


class ContentTypeError(FileSenseError):
    """A content type label is not present in the content-type table."""
