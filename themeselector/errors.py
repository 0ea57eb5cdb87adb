"""Error codes and error handling utilities for Theme Selector."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for theme apply operations."""

    # Applier process errors
    APPLIER_NOT_CONFIGURED = auto()
    APPLIER_SPAWN_FAILED = auto()
    APPLIER_EXIT_NONZERO = auto()
    APPLIER_OUTPUT_FAILED = auto()

    # Theme / asset errors
    SELECTOR_INVALID = auto()
    ASSET_ROOT_MISSING = auto()
    THEME_NOT_FOUND = auto()

    # Operation errors
    OPERATION_CANCELLED = auto()
    OPERATION_FAILED = auto()

    # Configuration errors
    CONFIG_INVALID = auto()
    CONFIG_MISSING = auto()
    CONFIG_PERMISSION_DENIED = auto()


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.APPLIER_NOT_CONFIGURED: "No theme applier is configured. Set its path in Settings.",
    ErrorCode.APPLIER_SPAWN_FAILED: "The theme applier could not be started.",
    ErrorCode.APPLIER_EXIT_NONZERO: "The theme applier reported an error.",
    ErrorCode.APPLIER_OUTPUT_FAILED: "The theme applier's output could not be read.",

    ErrorCode.SELECTOR_INVALID: "The theme name is empty or malformed.",
    ErrorCode.ASSET_ROOT_MISSING: "Wallpaper Engine workshop folder was not found. Set it in Settings.",
    ErrorCode.THEME_NOT_FOUND: "The theme folder was not found. It may have been moved or deleted.",

    ErrorCode.OPERATION_CANCELLED: "Operation was cancelled by user.",
    ErrorCode.OPERATION_FAILED: "Operation failed. See details for more information.",

    ErrorCode.CONFIG_INVALID: "Configuration is invalid. Reset to defaults?",
    ErrorCode.CONFIG_MISSING: "Configuration not found. Using defaults.",
    ErrorCode.CONFIG_PERMISSION_DENIED: "Cannot save configuration. Check folder permissions.",
}

_SUGGESTIONS: dict[ErrorCode, str] = {
    ErrorCode.APPLIER_NOT_CONFIGURED: "Open Settings and point the applier path at theme.ps1.",
    ErrorCode.APPLIER_SPAWN_FAILED: "Check that the applier exists and PowerShell is available.",
    ErrorCode.APPLIER_EXIT_NONZERO: "Review the status log for the applier's output.",
    ErrorCode.APPLIER_OUTPUT_FAILED: "Check the log file; the applier may still have applied the theme.",
    ErrorCode.ASSET_ROOT_MISSING: "Use Settings > Auto-detect, or browse to steamapps/workshop/content/431960.",
}


@dataclass
class ThemeSelectorError(Exception):
    """Base exception with error code and context."""

    code: ErrorCode
    message: str = ""
    path: Path | None = None
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = ERROR_MESSAGES.get(self.code, "An unexpected error occurred.")
        if not self.suggestion:
            self.suggestion = _SUGGESTIONS.get(self.code, "")

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"\nFile: {self.path}")
        if self.details:
            details_str = " | ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"\nDetails: {details_str}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging or UI display."""
        return {
            "code": self.code.name,
            "message": self.message,
            "path": str(self.path) if self.path else None,
            "details": self.details,
            "suggestion": self.suggestion,
        }


def classify_exception(exc: Exception, path: Path | None = None) -> ThemeSelectorError:
    """Classify a generic exception into a ThemeSelectorError with appropriate code."""
    exc_name = type(exc).__name__
    exc_str = str(exc).lower()

    if isinstance(exc, ThemeSelectorError):
        return exc
    if "FileNotFoundError" in exc_name or "no such file" in exc_str or "cannot find" in exc_str:
        return ThemeSelectorError(
            ErrorCode.APPLIER_SPAWN_FAILED,
            message=f"{ERROR_MESSAGES[ErrorCode.APPLIER_SPAWN_FAILED]} ({exc})",
            path=path,
            details={"original": exc_str},
        )
    if "PermissionError" in exc_name or "access is denied" in exc_str or "permission denied" in exc_str:
        return ThemeSelectorError(
            ErrorCode.CONFIG_PERMISSION_DENIED, path=path, details={"original": exc_str}
        )
    if isinstance(exc, ValueError) and "selector" in exc_str:
        return ThemeSelectorError(ErrorCode.SELECTOR_INVALID, details={"original": exc_str})

    return ThemeSelectorError(
        ErrorCode.OPERATION_FAILED,
        message=f"{exc_name}: {exc}",
        path=path,
        details={"original": exc_str},
    )


def format_error_for_user(error: ThemeSelectorError | Exception | str) -> str:
    """Format an error for display to the user with actionable suggestions."""
    if isinstance(error, str):
        return error.strip() or ERROR_MESSAGES[ErrorCode.OPERATION_FAILED]
    if isinstance(error, ThemeSelectorError):
        parts = [error.message]
        if error.suggestion and error.suggestion != error.message:
            parts.append(f"\n\n{error.suggestion}")
        if error.path:
            parts.append(f"\n\nFile: {error.path.name}")
        return "".join(parts)

    classified = classify_exception(error)
    return format_error_for_user(classified)
