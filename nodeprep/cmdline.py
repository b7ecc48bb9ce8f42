"""Render kubelet flags as command line strings for Linux and Windows nodes."""
from typing import Mapping, Optional

from .kubelet import AUTHENTICATION_FLAGS, KUBELET_FLAG_FIELDS

# Flags carried by the kubelet config file instead of the command line
TRANSLATED_KUBELET_FLAGS = frozenset(
    [spec.flag for spec in KUBELET_FLAG_FIELDS]
) | AUTHENTICATION_FLAGS


def get_kubelet_flag_string(
    flags: Mapping[str, str],
    config_file_path: Optional[str] = None
) -> str:
    """
    Return ``--key=value`` tokens sorted by flag name, space separated

    When ``config_file_path`` is given the flags translated into the config
    file are left out and ``--config=<path>`` takes their place.
    """
    args = dict(flags)
    if config_file_path:
        args = {flag: value for flag, value in args.items() if flag not in TRANSLATED_KUBELET_FLAGS}
        args['--config'] = config_file_path
    return ' '.join(f"{flag}={args[flag]}" for flag in sorted(args))


def get_kubelet_flag_string_psh(flags: Mapping[str, str]) -> str:
    """Return flags as quoted PowerShell array items: ``"--a=1", "--b=2"``"""
    return ', '.join(f'"{flag}={flags[flag]}"' for flag in sorted(flags))
