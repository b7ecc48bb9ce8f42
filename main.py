#!/usr/bin/env python3
import os
import sys

import click
import colorama
import yaml

from nodeprep.artifacts import KUBELET_CONFIG_FILE_PATH, render_node_pool, write_artifacts
from nodeprep.cmdline import get_kubelet_flag_string, get_kubelet_flag_string_psh
from nodeprep.config import SUPPORTED_OS, get_node_pool, get_node_pools, load_config
from nodeprep.errors import NodePrepError
from nodeprep.kubelet import get_kubelet_config_file_content
from nodeprep.sysctl import get_sysctl_config_file_content
from nodeprep.utils import log_error, log_message, log_success, log_warning, write_text_file

colorama.init(autoreset=True)

CONFIG_ERRORS = (NodePrepError, click.ClickException, OSError, yaml.YAMLError)


def _fail(message):
    log_error(message)
    sys.exit(1)


def _load_pools(config, pool_name=None):
    try:
        cfg = load_config(config)
        if pool_name:
            return [get_node_pool(cfg, pool_name)]
        return get_node_pools(cfg)
    except CONFIG_ERRORS as e:
        _fail(f"Configuration error: {_describe(e)}")


def _describe(error):
    if isinstance(error, click.ClickException):
        return error.format_message()
    return str(error)


def _emit(content, output):
    """Print rendered content or write it to a file"""
    if output:
        try:
            write_text_file(content, output)
        except OSError as e:
            _fail(f"Failed to write {output}: {e}")
        log_success(f"Wrote {output}")
    else:
        click.echo(content, nl=False)


@click.group()
def cli():
    """Kubernetes node provisioning artifact generator"""
    pass


@cli.command()
@click.option('--config', '-c', required=True, help='Path to node pool config.yml')
@click.option('--pool', '-p', required=True, help='Node pool name')
@click.option('--output', '-o', help='Write to this file instead of stdout')
@click.option('--indent', default=2, show_default=True, help='JSON indentation')
def kubelet_config(config, pool, output, indent):
    """Render the kubelet config file JSON for a node pool"""
    node_pool = _load_pools(config, pool)[0]
    if node_pool.os_type == 'windows':
        log_warning(node_pool, "Windows node pools take kubelet flags on the command line")

    try:
        content = get_kubelet_config_file_content(
            node_pool.kubelet_flags, node_pool.custom_kubelet_config, indent=indent
        )
    except NodePrepError as e:
        _fail(f"Kubelet config error for pool {node_pool.name}: {e}")

    _emit(content + "\n", output)


@cli.command()
@click.option('--config', '-c', required=True, help='Path to node pool config.yml')
@click.option('--pool', '-p', required=True, help='Node pool name')
@click.option('--output', '-o', help='Write to this file instead of stdout')
def sysctl_config(config, pool, output):
    """Render the sysctl config file for a node pool"""
    node_pool = _load_pools(config, pool)[0]
    if node_pool.custom_os_config is None:
        log_warning(node_pool, "No custom_os_config, rendering baseline sysctls only")
    _emit(get_sysctl_config_file_content(node_pool.custom_os_config), output)


@cli.command()
@click.option('--config', '-c', required=True, help='Path to node pool config.yml')
@click.option('--pool', '-p', required=True, help='Node pool name')
def kubelet_flags(config, pool):
    """Print the kubelet command line flags for a node pool"""
    node_pool = _load_pools(config, pool)[0]
    if node_pool.os_type == 'windows':
        click.echo(get_kubelet_flag_string_psh(node_pool.kubelet_flags))
    else:
        config_file_path = KUBELET_CONFIG_FILE_PATH if node_pool.kubelet_config_file else None
        click.echo(get_kubelet_flag_string(node_pool.kubelet_flags, config_file_path=config_file_path))


@cli.command()
@click.option('--config', '-c', required=True, help='Path to node pool config.yml')
@click.option('--output-dir', '-d', required=True, help='Directory to write rendered files into')
@click.option('--dry-run', is_flag=True, help='Show what would be written without writing')
def render(config, output_dir, dry_run):
    """Render provisioning artifacts for every node pool"""
    pools = _load_pools(config)

    click.echo(colorama.Fore.CYAN + "Rendering artifacts for " +
               colorama.Fore.YELLOW + f"{len(pools)}" + colorama.Fore.CYAN + " node pool(s)")

    for node_pool in pools:
        try:
            artifacts = render_node_pool(node_pool)
        except NodePrepError as e:
            _fail(f"Failed to render pool {node_pool.name}: {e}")

        pool_dir = os.path.join(output_dir, node_pool.name)
        if dry_run:
            click.echo(colorama.Fore.YELLOW + f"\n=== DRY RUN: {node_pool.name} ({node_pool.os_type}) ===")
            for path in artifacts:
                click.echo(f"  - {path}")
            continue

        try:
            write_artifacts(node_pool, artifacts, pool_dir)
        except OSError as e:
            _fail(f"Failed to write artifacts for pool {node_pool.name}: {e}")

    if not dry_run:
        log_success(f"✅ Artifacts rendered to {output_dir}")


@cli.command()
@click.option('--config', '-c', required=True, help='Path to node pool config.yml')
def validate(config):
    """Validate a config and render every node pool in memory"""
    pools = _load_pools(config)

    failed = False
    for node_pool in pools:
        try:
            artifacts = render_node_pool(node_pool)
        except NodePrepError as e:
            log_error(node_pool, "Render failed:", details=str(e))
            failed = True
            continue
        log_message(node_pool, f"OK ({len(artifacts)} artifacts)")

    if failed:
        _fail("❌ Validation failed - please fix issues before provisioning")
    log_success("✅ All node pools rendered successfully")


@cli.command()
@click.option('--os', '-o', 'os_type', type=click.Choice(SUPPORTED_OS), default='linux',
              help='Generate config for specific OS')
@click.option('--output', default='nodeprep-config.yml',
              help='Output file name (default: nodeprep-config.yml)')
def generate_config(os_type, output):
    """Generate a sample node pool configuration file"""
    from nodeprep.config_generator import generate_sample_config

    click.echo(colorama.Fore.CYAN + "Generating sample node pool configuration...")

    try:
        generate_sample_config(os_type=os_type, output_file=output)
    except OSError as e:
        _fail(f"Failed to generate config: {e}")

    log_success(f"✅ Sample configuration generated: {output}")
    click.echo(colorama.Fore.CYAN + "\nNext steps:")
    click.echo(colorama.Fore.YELLOW + f"1. Edit {output} with your cluster's kubelet flags")
    click.echo(colorama.Fore.YELLOW + "2. Adjust custom_kubelet_config and custom_os_config per pool")
    click.echo(colorama.Fore.YELLOW + f"3. Run: python main.py render -c {output} -d out --dry-run")


@cli.command()
def list_supported():
    """List supported operating systems and rendered artifacts"""
    click.echo(colorama.Fore.CYAN + "Supported Operating Systems:")
    for os_type in SUPPORTED_OS:
        click.echo(f"  • {os_type}")

    click.echo(colorama.Fore.CYAN + "\nRendered Artifacts:")
    artifacts = [
        "Kubelet config file (KubeletConfiguration v1beta1 JSON)",
        "Kubelet command line flags (/etc/default/kubelet)",
        "Sysctl config file (/etc/sysctl.d)",
        "Transparent huge page settings",
        "Windows kubelet argument list (PowerShell)"
    ]
    for artifact in artifacts:
        click.echo(f"  • {artifact}")


if __name__ == "__main__":
    cli()
