import click
import yaml

from .models import NodePool, load_node_pool
from .utils import log_debug, log_warning

SUPPORTED_OS = ['linux', 'windows']


def load_config(config_file):
    """Load and validate a node pool configuration file"""
    with open(config_file, 'r') as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise click.ClickException(f"Configuration file {config_file} must contain a mapping")

    validate_config(config)
    log_debug(f"Loaded configuration from {config_file}")
    return config


def validate_config(config):
    """Validate configuration structure and supported options"""
    cluster = config.get('cluster') or {}
    if not isinstance(cluster, dict):
        raise click.ClickException("'cluster' section must be a mapping")
    if not isinstance(cluster.get('kubelet_flags') or {}, dict):
        raise click.ClickException("'cluster.kubelet_flags' must be a mapping")

    pools = config.get('node_pools')
    if not pools or not isinstance(pools, list):
        raise click.ClickException("'node_pools' must be a non-empty list")

    seen = set()
    for pool in pools:
        if not isinstance(pool, dict) or not pool.get('name'):
            raise click.ClickException("Every node pool needs a 'name'")
        name = pool['name']
        if name in seen:
            raise click.ClickException(f"Duplicate node pool name: {name}")
        seen.add(name)

        if not isinstance(pool.get('kubelet_flags') or {}, dict):
            raise click.ClickException(f"'node_pools[{name}].kubelet_flags' must be a mapping")

        os_type = pool.get('os_type', 'linux')
        if os_type not in SUPPORTED_OS:
            raise click.ClickException(
                f"Unsupported OS for node pool {name}: {os_type}. "
                f"Supported: {', '.join(SUPPORTED_OS)}"
            )

        if os_type == 'windows' and pool.get('custom_os_config'):
            log_warning(pool, "custom_os_config is ignored on Windows node pools")


def _merge_cluster_flags(cfg, raw_pool):
    cluster_flags = (cfg.get('cluster') or {}).get('kubelet_flags') or {}
    merged = dict(raw_pool)
    merged['kubelet_flags'] = {**cluster_flags, **(raw_pool.get('kubelet_flags') or {})}
    return merged


def get_node_pools(cfg):
    """
    Return NodePool objects for every pool in the config.
    Cluster level kubelet_flags are merged under each pool's own flags:
    cfg['cluster']['kubelet_flags'] + cfg['node_pools'][i]['kubelet_flags'] --> pool.kubelet_flags
    """
    return [load_node_pool(_merge_cluster_flags(cfg, raw_pool)) for raw_pool in cfg['node_pools']]


def get_node_pool(cfg, name) -> NodePool:
    for raw_pool in cfg['node_pools']:
        if raw_pool.get('name') == name:
            return load_node_pool(_merge_cluster_flags(cfg, raw_pool))
    raise click.ClickException(f"Node pool not found: {name}")
