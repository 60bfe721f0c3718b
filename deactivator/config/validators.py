"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    notifications = config_dict.get("notifications") or {}
    if not isinstance(notifications, dict):
        return warning_messages

    recipients = notifications.get("admin_recipients") or []
    if isinstance(recipients, str):
        recipients = [part for part in recipients.split(",")]

    if isinstance(recipients, list):
        normalized = [r.strip().lower() for r in recipients if isinstance(r, str) and r.strip()]

        if not normalized:
            warning_messages.append(
                "No admin_recipients configured; only jobs with their own "
                "recipients will trigger emails"
            )

        duplicates = sorted({r for r in normalized if normalized.count(r) > 1})
        if duplicates:
            warning_messages.append(
                f"Duplicate admin_recipients will be notified once: {', '.join(duplicates)}"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit configuration warnings using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=3)
