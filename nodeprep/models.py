"""Typed inputs and outputs of the node configuration synthesizers."""
from typing import Any, Dict, List, Literal, Optional

from pydantic import (BaseModel, ConfigDict, Field, StrictBool, StrictInt,
                      StrictStr, ValidationError, field_validator,
                      model_validator)

from .errors import SchemaError

KUBELET_CONFIG_KIND = 'KubeletConfiguration'
KUBELET_CONFIG_API_VERSION = 'kubelet.config.k8s.io/v1beta1'


def _flag_value_to_str(value: Any) -> str:
    # YAML turns unquoted flag values into bools and numbers
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return ''
    return str(value)


class CustomKubeletConfig(BaseModel):
    """User supplied kubelet overrides; every populated field wins over flags"""

    model_config = ConfigDict(frozen=True, extra='forbid', populate_by_name=True)

    cpu_manager_policy: Optional[StrictStr] = Field(default=None, alias='cpuManagerPolicy')
    cpu_cfs_quota: Optional[StrictBool] = Field(default=None, alias='cpuCfsQuota')
    cpu_cfs_quota_period: Optional[StrictStr] = Field(default=None, alias='cpuCfsQuotaPeriod')
    image_gc_high_threshold: Optional[StrictInt] = Field(default=None, alias='imageGcHighThreshold', ge=0, le=100)
    image_gc_low_threshold: Optional[StrictInt] = Field(default=None, alias='imageGcLowThreshold', ge=0, le=100)
    topology_manager_policy: Optional[StrictStr] = Field(default=None, alias='topologyManagerPolicy')
    allowed_unsafe_sysctls: Optional[List[StrictStr]] = Field(default=None, alias='allowedUnsafeSysctls')
    fail_swap_on: Optional[StrictBool] = Field(default=None, alias='failSwapOn')
    container_log_max_size_mb: Optional[StrictInt] = Field(default=None, alias='containerLogMaxSizeMB', ge=0)
    container_log_max_files: Optional[StrictInt] = Field(default=None, alias='containerLogMaxFiles', ge=0)
    pod_max_pids: Optional[StrictInt] = Field(default=None, alias='podMaxPids')

    @model_validator(mode='after')
    def _check_image_gc_thresholds(self):
        high, low = self.image_gc_high_threshold, self.image_gc_low_threshold
        if high is not None and low is not None and low > high:
            raise ValueError(
                f"imageGcLowThreshold ({low}) must not exceed imageGcHighThreshold ({high})"
            )
        return self


class CustomOSConfig(BaseModel):
    """User supplied OS tuning: sysctl overrides and transparent huge pages"""

    model_config = ConfigDict(frozen=True, extra='forbid', populate_by_name=True)

    sysctls: Dict[str, str] = Field(default_factory=dict)
    transparent_huge_page_enabled: Optional[StrictStr] = Field(default=None, alias='transparentHugePageEnabled')
    transparent_huge_page_defrag: Optional[StrictStr] = Field(default=None, alias='transparentHugePageDefrag')

    @field_validator('sysctls', mode='before')
    @classmethod
    def _stringify_sysctls(cls, value):
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("sysctls must be a mapping of key to value")
        return {str(key): _flag_value_to_str(item) for key, item in value.items()}


class NodePool(BaseModel):
    """One node pool entry of a nodeprep YAML config"""

    model_config = ConfigDict(frozen=True, extra='forbid')

    name: StrictStr
    os_type: Literal['linux', 'windows'] = 'linux'
    kubelet_config_file: StrictBool = True
    kubelet_flags: Dict[str, str] = Field(default_factory=dict)
    custom_kubelet_config: Optional[CustomKubeletConfig] = None
    custom_os_config: Optional[CustomOSConfig] = None

    @field_validator('kubelet_flags', mode='before')
    @classmethod
    def _stringify_flags(cls, value):
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("kubelet_flags must be a mapping of flag to value")
        return {str(flag): _flag_value_to_str(item) for flag, item in value.items()}


# KubeletConfiguration v1beta1 document. Field declaration order is the
# serialized key order.

class _KubeletBlock(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class KubeletX509Authentication(_KubeletBlock):
    client_ca_file: Optional[str] = Field(default=None, alias='clientCAFile')


class KubeletWebhookAuthentication(_KubeletBlock):
    enabled: Optional[bool] = None
    cache_ttl: Optional[str] = Field(default=None, alias='cacheTTL')


class KubeletAnonymousAuthentication(_KubeletBlock):
    enabled: Optional[bool] = None


class KubeletAuthentication(_KubeletBlock):
    x509: Optional[KubeletX509Authentication] = None
    webhook: Optional[KubeletWebhookAuthentication] = None
    anonymous: KubeletAnonymousAuthentication = Field(default_factory=KubeletAnonymousAuthentication)


class KubeletWebhookAuthorization(_KubeletBlock):
    cache_authorized_ttl: Optional[str] = Field(default=None, alias='cacheAuthorizedTTL')
    cache_unauthorized_ttl: Optional[str] = Field(default=None, alias='cacheUnauthorizedTTL')


class KubeletAuthorization(_KubeletBlock):
    mode: Optional[str] = None
    webhook: Optional[KubeletWebhookAuthorization] = None


class KubeletConfiguration(_KubeletBlock):
    kind: str = KUBELET_CONFIG_KIND
    api_version: str = Field(default=KUBELET_CONFIG_API_VERSION, alias='apiVersion')
    static_pod_path: Optional[str] = Field(default=None, alias='staticPodPath')
    address: Optional[str] = None
    read_only_port: Optional[int] = Field(default=None, alias='readOnlyPort')
    tls_cert_file: Optional[str] = Field(default=None, alias='tlsCertFile')
    tls_private_key_file: Optional[str] = Field(default=None, alias='tlsPrivateKeyFile')
    tls_cipher_suites: Optional[List[str]] = Field(default=None, alias='tlsCipherSuites')
    rotate_certificates: Optional[bool] = Field(default=None, alias='rotateCertificates')
    authentication: KubeletAuthentication = Field(default_factory=KubeletAuthentication)
    authorization: KubeletAuthorization = Field(default_factory=KubeletAuthorization)
    event_record_qps: Optional[int] = Field(default=None, alias='eventRecordQPS')
    cluster_domain: Optional[str] = Field(default=None, alias='clusterDomain')
    cluster_dns: Optional[List[str]] = Field(default=None, alias='clusterDNS')
    streaming_connection_idle_timeout: Optional[str] = Field(default=None, alias='streamingConnectionIdleTimeout')
    node_status_update_frequency: Optional[str] = Field(default=None, alias='nodeStatusUpdateFrequency')
    image_gc_high_threshold_percent: Optional[int] = Field(default=None, alias='imageGCHighThresholdPercent')
    image_gc_low_threshold_percent: Optional[int] = Field(default=None, alias='imageGCLowThresholdPercent')
    cgroups_per_qos: Optional[bool] = Field(default=None, alias='cgroupsPerQOS')
    cpu_manager_policy: Optional[str] = Field(default=None, alias='cpuManagerPolicy')
    topology_manager_policy: Optional[str] = Field(default=None, alias='topologyManagerPolicy')
    max_pods: Optional[int] = Field(default=None, alias='maxPods')
    pod_pids_limit: Optional[int] = Field(default=None, alias='podPidsLimit')
    resolv_conf: Optional[str] = Field(default=None, alias='resolvConf')
    cpu_cfs_quota: Optional[bool] = Field(default=None, alias='cpuCFSQuota')
    cpu_cfs_quota_period: Optional[str] = Field(default=None, alias='cpuCFSQuotaPeriod')
    eviction_hard: Optional[Dict[str, str]] = Field(default=None, alias='evictionHard')
    protect_kernel_defaults: Optional[bool] = Field(default=None, alias='protectKernelDefaults')
    feature_gates: Optional[Dict[str, bool]] = Field(default=None, alias='featureGates')
    fail_swap_on: Optional[bool] = Field(default=None, alias='failSwapOn')
    container_log_max_size: Optional[str] = Field(default=None, alias='containerLogMaxSize')
    container_log_max_files: Optional[int] = Field(default=None, alias='containerLogMaxFiles')
    system_reserved: Optional[Dict[str, str]] = Field(default=None, alias='systemReserved')
    kube_reserved: Optional[Dict[str, str]] = Field(default=None, alias='kubeReserved')
    enforce_node_allocatable: Optional[List[str]] = Field(default=None, alias='enforceNodeAllocatable')
    allowed_unsafe_sysctls: Optional[List[str]] = Field(default=None, alias='allowedUnsafeSysctls')

    def to_document(self) -> Dict[str, Any]:
        """Return the populated fields keyed by their JSON names, in schema order"""
        return self.model_dump(by_alias=True, exclude_none=True)


def _schema_error(exc: ValidationError, prefix: str) -> SchemaError:
    first = exc.errors()[0]
    location = '.'.join(str(part) for part in first.get('loc', ()))
    field = f"{prefix}.{location}" if location else prefix
    return SchemaError(first.get('msg', str(exc)), field=field)


def load_custom_kubelet_config(data: Optional[Dict[str, Any]]) -> Optional[CustomKubeletConfig]:
    """Build a CustomKubeletConfig from a plain mapping, or None when absent"""
    if data is None:
        return None
    try:
        return CustomKubeletConfig.model_validate(data)
    except ValidationError as e:
        raise _schema_error(e, 'custom_kubelet_config') from e


def load_custom_os_config(data: Optional[Dict[str, Any]]) -> Optional[CustomOSConfig]:
    """Build a CustomOSConfig from a plain mapping, or None when absent"""
    if data is None:
        return None
    try:
        return CustomOSConfig.model_validate(data)
    except ValidationError as e:
        raise _schema_error(e, 'custom_os_config') from e


def load_node_pool(data: Dict[str, Any]) -> NodePool:
    name = data.get('name', '<unnamed>') if isinstance(data, dict) else '<unnamed>'
    try:
        return NodePool.model_validate(data)
    except ValidationError as e:
        raise _schema_error(e, f"node_pools[{name}]") from e
