"""Exceptions for framebatch.

Fatal errors (configuration, missing inputs, missing tools) abort a run
before any item is processed. ``ExtractionError`` and ``FetchError`` are
raised by external collaborators and captured per item.
"""

from __future__ import annotations


class FrameBatchError(Exception):
    """Base exception for framebatch."""


class ConfigError(FrameBatchError, ValueError):
    """Invalid configuration value."""


class InputNotFoundError(FrameBatchError, FileNotFoundError):
    """A required input path does not exist."""


class NotADirectoryPreconditionError(FrameBatchError, NotADirectoryError):
    """An input path that must be a directory is not one."""


class ToolNotFoundError(FrameBatchError):
    """A required external binary is not installed."""


class StepValidationError(FrameBatchError):
    """A pipeline step rejected its inputs."""


class ExtractionError(FrameBatchError):
    """The frame extractor exited unsuccessfully."""

    def __init__(self, message: str, detail: str = ""):
        super().__init__(message)
        self.detail = detail


class FetchError(FrameBatchError):
    """A URL could not be fetched."""
