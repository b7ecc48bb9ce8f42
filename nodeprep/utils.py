import os
import time
from typing import Any, Dict, Union

import click
import colorama

# Initialize colorama for cross-platform colored output
colorama.init(autoreset=True)

DEBUG_ENV_VAR = 'DEBUG'


def _pool_label(pool: Any) -> str:
    """Return the display name for a node pool, dict or plain string"""
    if isinstance(pool, dict):
        return pool.get('name', 'unknown')
    return getattr(pool, 'name', None) or str(pool)


def debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV_VAR, '').lower() in ('1', 'true', 'yes')


# Logging functions with colors - supports both general and pool-specific logging
def log_message(
    pool_or_message: Union[str, Dict[str, Any], Any],
    message: str = None,
    color: str = colorama.Fore.CYAN,
    details: str = None,
    details_color: str = colorama.Fore.MAGENTA,
    err: bool = False
) -> None:
    """
    Unified logging function for consistent formatting

    Usage:
        log_message("General message")  # General logging
        log_message(pool, "Pool-specific message")  # Pool-specific logging
    """
    if message is None:
        general_message = str(pool_or_message)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        formatted_msg = f"{color}[{timestamp}] [INFO] {general_message}{colorama.Style.RESET_ALL}"
        click.echo(formatted_msg, err=err)
    else:
        name = _pool_label(pool_or_message)

        base_msg = color + "[" + colorama.Fore.YELLOW + f"{name}" + color + f"] {message}"

        if details:
            base_msg += " " + details_color + f"{details}"

        base_msg += colorama.Style.RESET_ALL
        click.echo(base_msg, err=err)


def log_error(
    pool_or_message: Union[str, Dict[str, Any], Any],
    message: str = None,
    details: str = None
) -> None:
    """Log an error message to stderr"""
    if message is None:
        general_message = str(pool_or_message)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        formatted_msg = f"{colorama.Fore.RED}[{timestamp}] [ERROR] {general_message}{colorama.Style.RESET_ALL}"
        click.echo(formatted_msg, err=True)
    else:
        log_message(
            pool_or_message,
            message,
            color=colorama.Fore.RED,
            details=details,
            details_color=colorama.Fore.RED,
            err=True
        )


def log_success(
    pool_or_message: Union[str, Dict[str, Any], Any],
    message: str = None,
    details: str = None
) -> None:
    """Log a success message with consistent formatting"""
    if message is None:
        general_message = str(pool_or_message)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        formatted_msg = f"{colorama.Fore.GREEN}[{timestamp}] [SUCCESS] {general_message}{colorama.Style.RESET_ALL}"
        click.echo(formatted_msg)
    else:
        log_message(
            pool_or_message,
            message,
            color=colorama.Fore.GREEN,
            details=details
        )


def log_warning(
    pool_or_message: Union[str, Dict[str, Any], Any],
    message: str = None,
    details: str = None
) -> None:
    """Log a warning message to stderr"""
    if message is None:
        general_message = str(pool_or_message)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        formatted_msg = f"{colorama.Fore.YELLOW}[{timestamp}] [WARNING] {general_message}{colorama.Style.RESET_ALL}"
        click.echo(formatted_msg, err=True)
    else:
        log_message(
            pool_or_message,
            message,
            color=colorama.Fore.YELLOW,
            details=details,
            details_color=colorama.Fore.YELLOW,
            err=True
        )


def log_debug(
    pool_or_message: Union[str, Dict[str, Any], Any],
    message: str = None,
    details: str = None
) -> None:
    """Log a debug message (only shown if the DEBUG env var is set)"""
    if not debug_enabled():
        return

    if message is None:
        general_message = str(pool_or_message)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        formatted_msg = f"{colorama.Fore.MAGENTA}[{timestamp}] [DEBUG] {general_message}{colorama.Style.RESET_ALL}"
        click.echo(formatted_msg, err=True)
    else:
        log_message(
            pool_or_message,
            message,
            color=colorama.Fore.MAGENTA,
            details=details,
            details_color=colorama.Fore.CYAN,
            err=True
        )


# File and directory utilities
def ensure_directory(path: str, permissions: str = '755') -> None:
    """
    Ensure directory exists, applying permissions only to directories created here

    Args:
        path: Directory path
        permissions: Directory permissions (default: '755')
    """
    if not path or os.path.isdir(path):
        return
    ensure_directory(os.path.dirname(os.path.abspath(path)), permissions)
    os.mkdir(path)
    os.chmod(path, int(permissions, 8))


def write_text_file(content: str, file_path: str, permissions: str = '644') -> None:
    """
    Write rendered text to a file, creating parent directories

    Args:
        content: File content, written verbatim as UTF-8
        file_path: Output file path
        permissions: File permissions (default: '644')
    """
    ensure_directory(os.path.dirname(file_path))
    with open(file_path, 'w', encoding='utf-8', newline='\n') as f:
        f.write(content)
    os.chmod(file_path, int(permissions, 8))
    log_debug(f"Wrote {len(content)} bytes to {file_path}")
