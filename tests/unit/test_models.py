import pytest

from nodeprep.errors import SchemaError
from nodeprep.models import (CustomKubeletConfig, load_custom_kubelet_config,
                             load_custom_os_config, load_node_pool)


class TestCustomKubeletConfig:
    """Test custom kubelet config loading"""

    def test_camel_case_aliases(self):
        """Test the cluster spec field names"""
        custom = load_custom_kubelet_config({
            'cpuManagerPolicy': 'static',
            'cpuCfsQuota': True,
            'imageGcHighThreshold': 90,
            'containerLogMaxSizeMB': 20,
            'podMaxPids': 100,
        })
        assert custom.cpu_manager_policy == 'static'
        assert custom.cpu_cfs_quota is True
        assert custom.image_gc_high_threshold == 90
        assert custom.container_log_max_size_mb == 20
        assert custom.pod_max_pids == 100
        assert custom.topology_manager_policy is None

    def test_snake_case_names(self):
        """Test python field names are accepted too"""
        custom = load_custom_kubelet_config({'topology_manager_policy': 'best-effort'})
        assert custom.topology_manager_policy == 'best-effort'

    def test_absent(self):
        """Test None passes through"""
        assert load_custom_kubelet_config(None) is None

    @pytest.mark.parametrize("data, field", [
        ({'cpuCfsQuota': 'yes'}, 'cpuCfsQuota'),
        ({'imageGcHighThreshold': '90'}, 'imageGcHighThreshold'),
        ({'imageGcHighThreshold': 120}, 'imageGcHighThreshold'),
        ({'allowedUnsafeSysctls': 'kernel.msg*'}, 'allowedUnsafeSysctls'),
        ({'cpuManagerPolicyy': 'static'}, 'cpuManagerPolicyy'),
    ])
    def test_invalid_fields(self, data, field):
        """Test structural problems raise SchemaError naming the field"""
        with pytest.raises(SchemaError) as exc_info:
            load_custom_kubelet_config(data)
        assert field in exc_info.value.field

    def test_low_threshold_above_high(self):
        """Test image GC thresholds are cross checked"""
        with pytest.raises(SchemaError, match="must not exceed"):
            load_custom_kubelet_config({'imageGcHighThreshold': 70, 'imageGcLowThreshold': 80})

    def test_frozen(self):
        """Test overrides cannot be changed after construction"""
        custom = CustomKubeletConfig(cpu_manager_policy='static')
        with pytest.raises(Exception):
            custom.cpu_manager_policy = 'none'


class TestCustomOSConfig:
    """Test custom OS config loading"""

    def test_sysctl_values_become_strings(self):
        """Test YAML numbers are rendered as strings"""
        custom = load_custom_os_config({'sysctls': {'vm.max_map_count': 262144, 'net.ipv4.tcp_tw_reuse': True}})
        assert custom.sysctls == {'vm.max_map_count': '262144', 'net.ipv4.tcp_tw_reuse': 'true'}

    def test_transparent_huge_pages(self):
        """Test THP aliases"""
        custom = load_custom_os_config({'transparentHugePageEnabled': 'never',
                                        'transparentHugePageDefrag': 'defer'})
        assert custom.transparent_huge_page_enabled == 'never'
        assert custom.transparent_huge_page_defrag == 'defer'
        assert custom.sysctls == {}

    def test_invalid_sysctls(self):
        """Test sysctls must be a mapping"""
        with pytest.raises(SchemaError, match="custom_os_config"):
            load_custom_os_config({'sysctls': ['net.core.somaxconn=1']})


class TestNodePool:
    """Test node pool loading"""

    def test_defaults_and_flag_coercion(self):
        """Test YAML scalars in flags become strings"""
        pool = load_node_pool({
            'name': 'pool1',
            'kubelet_flags': {'--max-pods': 30, '--rotate-certificates': True, '--node-labels': None},
        })
        assert pool.os_type == 'linux'
        assert pool.kubelet_config_file is True
        assert pool.kubelet_flags == {'--max-pods': '30', '--rotate-certificates': 'true', '--node-labels': ''}
        assert pool.custom_kubelet_config is None

    def test_nested_overrides(self):
        """Test nested custom configs are parsed"""
        pool = load_node_pool({
            'name': 'pool1',
            'custom_kubelet_config': {'cpuManagerPolicy': 'static'},
            'custom_os_config': {'sysctls': {'kernel.pid_max': 4194304}},
        })
        assert pool.custom_kubelet_config.cpu_manager_policy == 'static'
        assert pool.custom_os_config.sysctls == {'kernel.pid_max': '4194304'}

    def test_invalid_pool(self):
        """Test errors name the pool"""
        with pytest.raises(SchemaError, match=r"node_pools\[pool1\]"):
            load_node_pool({'name': 'pool1', 'os_type': 'plan9'})
