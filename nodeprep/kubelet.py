"""Kubelet configuration file synthesis.

Merges the flat kubelet flag mapping computed for a node pool with an optional
``CustomKubeletConfig`` and serializes the result as a ``KubeletConfiguration``
v1beta1 JSON document, suitable for the kubelet ``--config`` argument.
"""
import json
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional

from .flags import (parse_bool, parse_feature_gates, parse_int,
                    parse_key_value_map, split_list)
from .models import (CustomKubeletConfig, KubeletAnonymousAuthentication,
                     KubeletAuthentication, KubeletAuthorization,
                     KubeletConfiguration, KubeletWebhookAuthentication,
                     KubeletWebhookAuthorization, KubeletX509Authentication)

DEFAULT_INDENT = 2

WEBHOOK_AUTHENTICATION_CACHE_TTL = '2m0s'
WEBHOOK_AUTHORIZATION_CACHE_AUTHORIZED_TTL = '5m0s'
WEBHOOK_AUTHORIZATION_CACHE_UNAUTHORIZED_TTL = '30s'
WEBHOOK_AUTHORIZATION_MODE = 'Webhook'

AUTHENTICATION_FLAGS = frozenset([
    '--client-ca-file',
    '--authentication-token-webhook',
    '--anonymous-auth',
    '--authorization-mode',
])


def _text(flag, value):
    return value


def _int32(flag, value):
    return parse_int(flag, value, bits=32)


def _int64(flag, value):
    return parse_int(flag, value, bits=64)


def _list(flag, value):
    return split_list(value)


def _sorted_map(parse):
    def parse_sorted(flag, value):
        parsed = parse(flag, value)
        return {key: parsed[key] for key in sorted(parsed)}
    return parse_sorted


_key_value_map = _sorted_map(lambda flag, value: parse_key_value_map(flag, value, '='))
_eviction_map = _sorted_map(lambda flag, value: parse_key_value_map(flag, value, '<'))
_feature_gates = _sorted_map(parse_feature_gates)


class FlagField(NamedTuple):
    flag: str
    field: str
    parse: Callable[[str, str], Any]


# Flags translated into KubeletConfiguration fields. Durations pass through verbatim.
KUBELET_FLAG_FIELDS = (
    FlagField('--pod-manifest-path', 'static_pod_path', _text),
    FlagField('--address', 'address', _text),
    FlagField('--read-only-port', 'read_only_port', _int32),
    FlagField('--tls-cert-file', 'tls_cert_file', _text),
    FlagField('--tls-private-key-file', 'tls_private_key_file', _text),
    FlagField('--tls-cipher-suites', 'tls_cipher_suites', _list),
    FlagField('--rotate-certificates', 'rotate_certificates', parse_bool),
    FlagField('--event-qps', 'event_record_qps', _int32),
    FlagField('--cluster-domain', 'cluster_domain', _text),
    FlagField('--cluster-dns', 'cluster_dns', _list),
    FlagField('--streaming-connection-idle-timeout', 'streaming_connection_idle_timeout', _text),
    FlagField('--node-status-update-frequency', 'node_status_update_frequency', _text),
    FlagField('--image-gc-high-threshold', 'image_gc_high_threshold_percent', _int32),
    FlagField('--image-gc-low-threshold', 'image_gc_low_threshold_percent', _int32),
    FlagField('--cgroups-per-qos', 'cgroups_per_qos', parse_bool),
    FlagField('--max-pods', 'max_pods', _int32),
    FlagField('--pod-max-pids', 'pod_pids_limit', _int64),
    FlagField('--resolv-conf', 'resolv_conf', _text),
    FlagField('--cpu-cfs-quota', 'cpu_cfs_quota', parse_bool),
    FlagField('--cpu-cfs-quota-period', 'cpu_cfs_quota_period', _text),
    FlagField('--eviction-hard', 'eviction_hard', _eviction_map),
    FlagField('--protect-kernel-defaults', 'protect_kernel_defaults', parse_bool),
    FlagField('--feature-gates', 'feature_gates', _feature_gates),
    FlagField('--fail-swap-on', 'fail_swap_on', parse_bool),
    FlagField('--container-log-max-size', 'container_log_max_size', _text),
    FlagField('--container-log-max-files', 'container_log_max_files', _int32),
    FlagField('--system-reserved', 'system_reserved', _key_value_map),
    FlagField('--kube-reserved', 'kube_reserved', _key_value_map),
    FlagField('--enforce-node-allocatable', 'enforce_node_allocatable', _list),
    FlagField('--allowed-unsafe-sysctls', 'allowed_unsafe_sysctls', _list),
)


def _flag(flags: Mapping[str, str], name: str) -> Optional[str]:
    value = flags.get(name)
    if value is None or value == '':
        return None
    return value


def _build_authentication(flags: Mapping[str, str]) -> KubeletAuthentication:
    x509 = None
    client_ca_file = _flag(flags, '--client-ca-file')
    if client_ca_file is not None:
        x509 = KubeletX509Authentication(client_ca_file=client_ca_file)

    webhook = None
    token_webhook = _flag(flags, '--authentication-token-webhook')
    if token_webhook is not None and parse_bool('--authentication-token-webhook', token_webhook):
        webhook = KubeletWebhookAuthentication(
            enabled=True,
            cache_ttl=WEBHOOK_AUTHENTICATION_CACHE_TTL,
        )

    anonymous = KubeletAnonymousAuthentication()
    anonymous_auth = _flag(flags, '--anonymous-auth')
    if anonymous_auth is not None and parse_bool('--anonymous-auth', anonymous_auth):
        anonymous = KubeletAnonymousAuthentication(enabled=True)

    return KubeletAuthentication(x509=x509, webhook=webhook, anonymous=anonymous)


def _build_authorization(flags: Mapping[str, str]) -> KubeletAuthorization:
    mode = _flag(flags, '--authorization-mode')
    webhook = None
    if mode == WEBHOOK_AUTHORIZATION_MODE:
        webhook = KubeletWebhookAuthorization(
            cache_authorized_ttl=WEBHOOK_AUTHORIZATION_CACHE_AUTHORIZED_TTL,
            cache_unauthorized_ttl=WEBHOOK_AUTHORIZATION_CACHE_UNAUTHORIZED_TTL,
        )
    return KubeletAuthorization(mode=mode, webhook=webhook)


def _custom_overrides(custom: CustomKubeletConfig) -> Dict[str, Any]:
    """Return the KubeletConfiguration fields replaced by populated custom fields"""
    overrides = {}
    if custom.cpu_manager_policy:
        overrides['cpu_manager_policy'] = custom.cpu_manager_policy
    if custom.cpu_cfs_quota is not None:
        overrides['cpu_cfs_quota'] = custom.cpu_cfs_quota
    if custom.cpu_cfs_quota_period:
        overrides['cpu_cfs_quota_period'] = custom.cpu_cfs_quota_period
    if custom.image_gc_high_threshold is not None:
        overrides['image_gc_high_threshold_percent'] = custom.image_gc_high_threshold
    if custom.image_gc_low_threshold is not None:
        overrides['image_gc_low_threshold_percent'] = custom.image_gc_low_threshold
    if custom.topology_manager_policy:
        overrides['topology_manager_policy'] = custom.topology_manager_policy
    if custom.allowed_unsafe_sysctls is not None:
        # an explicit empty list clears whatever the flags asked for
        overrides['allowed_unsafe_sysctls'] = list(custom.allowed_unsafe_sysctls) or None
    if custom.fail_swap_on is not None:
        overrides['fail_swap_on'] = custom.fail_swap_on
    if custom.container_log_max_size_mb is not None:
        overrides['container_log_max_size'] = f"{custom.container_log_max_size_mb}M"
    if custom.container_log_max_files is not None:
        overrides['container_log_max_files'] = custom.container_log_max_files
    if custom.pod_max_pids is not None:
        overrides['pod_pids_limit'] = custom.pod_max_pids
    return overrides


def build_kubelet_configuration(
    flags: Mapping[str, str],
    custom: Optional[CustomKubeletConfig] = None
) -> KubeletConfiguration:
    """
    Build the KubeletConfiguration record for a node pool

    Args:
        flags: Kubelet flag name (e.g. ``--max-pods``) to string value.
            Unknown flags are ignored; absent or empty flags leave their
            field unset.
        custom: Optional overrides applied after the flag derived values.

    Raises:
        ParseError: A boolean, integer or key/value flag is malformed.
    """
    fields = {}
    for spec in KUBELET_FLAG_FIELDS:
        value = _flag(flags, spec.flag)
        if value is None:
            continue
        parsed = spec.parse(spec.flag, value)
        if parsed == [] or parsed == {}:
            continue
        fields[spec.field] = parsed

    fields['authentication'] = _build_authentication(flags)
    fields['authorization'] = _build_authorization(flags)

    if custom is not None:
        fields.update(_custom_overrides(custom))

    return KubeletConfiguration(**fields)


def get_kubelet_config_file_content(
    flags: Optional[Mapping[str, str]],
    custom: Optional[CustomKubeletConfig] = None,
    indent: int = DEFAULT_INDENT
) -> str:
    """Render the kubelet config file JSON; an absent flag mapping renders nothing"""
    if flags is None:
        return ''
    config = build_kubelet_configuration(flags, custom)
    return json.dumps(config.to_document(), indent=indent, ensure_ascii=False)
