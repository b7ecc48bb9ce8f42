import os
from typing import Dict, List

from .cmdline import get_kubelet_flag_string, get_kubelet_flag_string_psh
from .kubelet import get_kubelet_config_file_content
from .models import NodePool
from .sysctl import get_sysctl_config_file_content, get_transparent_hugepage_settings
from .utils import log_debug, log_message, write_text_file

KUBELET_DEFAULTS_PATH = '/etc/default/kubelet'
KUBELET_CONFIG_FILE_PATH = '/etc/default/kubeletconfig.json'
SYSCTL_CONFIG_FILE_PATH = '/etc/sysctl.d/999-sysctl-aks.conf'
WINDOWS_KUBELET_ARGS_PATH = 'c:/k/kubeletconfigargs.ps1'


def render_linux_node_pool(pool: NodePool) -> Dict[str, str]:
    artifacts = {}
    config_file_path = KUBELET_CONFIG_FILE_PATH if pool.kubelet_config_file else None

    flag_string = get_kubelet_flag_string(pool.kubelet_flags, config_file_path=config_file_path)
    artifacts[KUBELET_DEFAULTS_PATH] = f"KUBELET_FLAGS={flag_string}\n"

    if pool.kubelet_config_file:
        content = get_kubelet_config_file_content(pool.kubelet_flags, pool.custom_kubelet_config)
        artifacts[KUBELET_CONFIG_FILE_PATH] = content + "\n"

    if pool.custom_os_config is not None:
        artifacts[SYSCTL_CONFIG_FILE_PATH] = get_sysctl_config_file_content(pool.custom_os_config)
        for path, value in get_transparent_hugepage_settings(pool.custom_os_config).items():
            artifacts[path] = f"{value}\n"

    return artifacts


def render_windows_node_pool(pool: NodePool) -> Dict[str, str]:
    # Windows kubelets take every flag on the command line
    args = get_kubelet_flag_string_psh(pool.kubelet_flags)
    return {WINDOWS_KUBELET_ARGS_PATH: f"$global:KubeletConfigArgs = @( {args} )\n"}


def render_node_pool(pool: NodePool) -> Dict[str, str]:
    """Render every provisioning file for a node pool, keyed by on-node path"""
    if pool.os_type == 'windows':
        artifacts = render_windows_node_pool(pool)
    else:
        artifacts = render_linux_node_pool(pool)
    log_debug(pool, f"Rendered {len(artifacts)} artifacts:", details=', '.join(artifacts))
    return artifacts


def _relative_node_path(node_path: str) -> str:
    drive, path = os.path.splitdrive(node_path)
    if not drive and len(node_path) > 1 and node_path[1] == ':':
        # windows drive letters on a posix host
        path = node_path[2:]
    return path.lstrip('/\\')


def write_artifacts(pool: NodePool, artifacts: Dict[str, str], output_dir: str) -> List[str]:
    """
    Write rendered artifacts below output_dir, mirroring their on-node paths

    Returns:
        list: Paths of the files written
    """
    written = []
    for node_path, content in artifacts.items():
        target = os.path.join(output_dir, _relative_node_path(node_path))
        write_text_file(content, target)
        log_message(pool, "Wrote", details=target)
        written.append(target)
    return written
