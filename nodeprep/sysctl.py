"""Sysctl configuration file synthesis."""
from typing import Dict, Optional

from .models import CustomOSConfig

# Network tuning applied to every node. Order is the output order.
BASELINE_SYSCTLS = (
    ('net.core.somaxconn', '16384'),
    ('net.ipv4.ip_local_port_range', '32768 60999'),
    ('net.ipv4.tcp_tw_reuse', '1'),
    ('net.core.message_burst', '80'),
    ('net.core.message_cost', '40'),
    ('net.ipv4.neigh.default.gc_thresh1', '4096'),
    ('net.ipv4.neigh.default.gc_thresh2', '8192'),
    ('net.ipv4.neigh.default.gc_thresh3', '16384'),
    ('net.ipv4.tcp_max_syn_backlog', '16384'),
    ('net.ipv4.tcp_retries2', '8'),
)

TRANSPARENT_HUGEPAGE_ENABLED_PATH = '/sys/kernel/mm/transparent_hugepage/enabled'
TRANSPARENT_HUGEPAGE_DEFRAG_PATH = '/sys/kernel/mm/transparent_hugepage/defrag'


def get_sysctl_config_file_content(custom: Optional[CustomOSConfig] = None) -> str:
    """
    Render sysctl ``key=value`` lines for a node

    Overrides of baseline keys keep the baseline position. Keys outside the
    baseline follow it in lexicographic order. Transparent huge page settings
    are not sysctls and never appear here.
    """
    overrides = dict(custom.sysctls) if custom is not None else {}

    lines = []
    for key, value in BASELINE_SYSCTLS:
        lines.append(f"{key}={overrides.pop(key, value)}")
    for key in sorted(overrides):
        lines.append(f"{key}={overrides[key]}")

    return ''.join(f"{line}\n" for line in lines)


def get_transparent_hugepage_settings(custom: Optional[CustomOSConfig]) -> Dict[str, str]:
    """Map sysfs transparent huge page files to the requested values"""
    settings = {}
    if custom is None:
        return settings
    if custom.transparent_huge_page_enabled:
        settings[TRANSPARENT_HUGEPAGE_ENABLED_PATH] = custom.transparent_huge_page_enabled
    if custom.transparent_huge_page_defrag:
        settings[TRANSPARENT_HUGEPAGE_DEFRAG_PATH] = custom.transparent_huge_page_defrag
    return settings
