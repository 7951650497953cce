# common/exceptions.py
# -*- coding: utf-8 -*-
"""
Exception hierarchy for yba-ctl.

Components raise these instead of exiting; the command-line entry point is
the only place that turns them into a message and an exit code.
"""

from typing import Any, List, Optional


class YbaCtlError(Exception):
    """Base class for every failure yba-ctl reports to the operator."""

    def __init__(self, message: str, phase: Optional[str] = None):
        self.phase = phase
        super().__init__(message)


class ConfigurationError(YbaCtlError):
    """Configuration is missing or invalid for the requested operation."""


class PreconditionError(YbaCtlError):
    """The command was run in the wrong context (already installed, wrong copy, ...)."""


class PreflightError(YbaCtlError):
    """One or more preflight checks failed."""

    def __init__(self, message: str, results: Optional[List[Any]] = None):
        self.results = results or []
        super().__init__(message, phase="preflight")


class VersionError(YbaCtlError):
    """A version string could not be parsed or compared."""


class ServiceLookupError(YbaCtlError):
    """A service is not registered, or does not provide the requested capability."""


class ServiceOperationError(YbaCtlError):
    """A lifecycle operation on a managed service failed."""

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.service_name = service_name
        self.operation = operation
        self.original_error = original_error
        super().__init__(message, phase=operation)


class ScriptError(YbaCtlError):
    """The external backup/restore script exited unsuccessfully."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        output: str = "",
    ):
        self.returncode = returncode
        self.output = output
        super().__init__(message, phase="script")


class DatabaseError(YbaCtlError):
    """A direct database operation failed."""


class StateError(YbaCtlError):
    """The installer state file could not be read or written."""


class LockError(YbaCtlError):
    """Another yba-ctl process holds the installation lock."""
