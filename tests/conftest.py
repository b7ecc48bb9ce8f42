import os
import tempfile

import pytest
import yaml

from nodeprep.models import CustomKubeletConfig, CustomOSConfig


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "scenarios: marks tests that exercise realistic node pool setups"
    )
    config.addinivalue_line(
        "markers", "e2e: marks tests as end-to-end CLI tests"
    )
    config.addinivalue_line(
        "markers", "smoke: marks tests as smoke tests for quick validation"
    )


@pytest.fixture
def kubelet_flags():
    """Kubelet flags as computed for a standard Linux node pool"""
    return {
        "--address": "0.0.0.0",
        "--pod-manifest-path": "/etc/kubernetes/manifests",
        "--cluster-domain": "cluster.local",
        "--cluster-dns": "10.0.0.10",
        "--cgroups-per-qos": "true",
        "--tls-cert-file": "/etc/kubernetes/certs/kubeletserver.crt",
        "--tls-private-key-file": "/etc/kubernetes/certs/kubeletserver.key",
        "--tls-cipher-suites": (
            "TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256,TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256,"
            "TLS_ECDHE_ECDSA_WITH_CHACHA20_POLY1305,TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384,"
            "TLS_ECDHE_RSA_WITH_CHACHA20_POLY1305,TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384,"
            "TLS_RSA_WITH_AES_256_GCM_SHA384,TLS_RSA_WITH_AES_128_GCM_SHA256"
        ),
        "--max-pods": "110",
        "--node-status-update-frequency": "10s",
        "--image-gc-high-threshold": "85",
        "--image-gc-low-threshold": "80",
        "--event-qps": "0",
        "--pod-max-pids": "-1",
        "--enforce-node-allocatable": "pods",
        "--streaming-connection-idle-timeout": "4h0m0s",
        "--rotate-certificates": "true",
        "--read-only-port": "10255",
        "--protect-kernel-defaults": "true",
        "--resolv-conf": "/etc/resolv.conf",
        "--anonymous-auth": "false",
        "--client-ca-file": "/etc/kubernetes/certs/ca.crt",
        "--authentication-token-webhook": "true",
        "--authorization-mode": "Webhook",
        "--eviction-hard": "memory.available<750Mi,nodefs.available<10%,nodefs.inodesFree<5%",
        "--feature-gates": "RotateKubeletServerCertificate=true,DynamicKubeletConfig=false",
        "--system-reserved": "cpu=2,memory=1Gi",
        "--kube-reserved": "cpu=100m,memory=1638Mi",
    }


@pytest.fixture
def custom_kubelet_config():
    """Overrides as a user would set them on a node pool"""
    return CustomKubeletConfig(
        cpu_manager_policy="static",
        cpu_cfs_quota=False,
        cpu_cfs_quota_period="200ms",
        image_gc_high_threshold=90,
        image_gc_low_threshold=70,
        topology_manager_policy="best-effort",
        allowed_unsafe_sysctls=["kernel.msg*", "net.ipv4.route.min_pmtu"],
    )


@pytest.fixture
def custom_os_config():
    return CustomOSConfig(
        sysctls={
            "net.core.somaxconn": "16384",
            "net.ipv4.tcp_tw_reuse": "1",
            "net.ipv4.ip_local_port_range": "32768 60999",
        },
        transparent_huge_page_enabled="never",
        transparent_huge_page_defrag="defer+madvise",
    )


@pytest.fixture
def sample_config(kubelet_flags):
    """Sample node pool configuration for testing"""
    return {
        'cluster': {
            'name': 'test-cluster',
            'kubelet_flags': dict(kubelet_flags)
        },
        'node_pools': [
            {
                'name': 'nodepool1',
                'os_type': 'linux',
                'kubelet_config_file': True,
                'custom_kubelet_config': {
                    'cpuManagerPolicy': 'static',
                    'cpuCfsQuota': False,
                    'cpuCfsQuotaPeriod': '200ms',
                    'imageGcHighThreshold': 90,
                    'imageGcLowThreshold': 70,
                    'topologyManagerPolicy': 'best-effort',
                    'allowedUnsafeSysctls': ['kernel.msg*', 'net.ipv4.route.min_pmtu']
                },
                'custom_os_config': {
                    'sysctls': {
                        'net.core.somaxconn': 32768,
                        'vm.max_map_count': 262144
                    },
                    'transparentHugePageEnabled': 'never'
                }
            },
            {
                'name': 'win1',
                'os_type': 'windows',
                'kubelet_config_file': False,
                'kubelet_flags': {
                    '--max-pods': 30,
                    '--cgroups-per-qos': False
                }
            }
        ]
    }


@pytest.fixture
def temp_config_file(sample_config):
    """Create a temporary config file"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yml', delete=False) as f:
        yaml.dump(sample_config, f)
    yield f.name
    os.unlink(f.name)


@pytest.fixture(autouse=True)
def no_debug_logging(monkeypatch):
    """Keep DEBUG output out of rendered stdout"""
    monkeypatch.delenv('DEBUG', raising=False)
