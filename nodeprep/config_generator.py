import yaml


def generate_sample_config(os_type='linux', output_file='nodeprep-config.yml'):
    """Generate a sample node pool configuration file for the specified OS"""

    config = {
        'cluster': {
            'name': 'sample-cluster',
            'kubelet_flags': get_cluster_kubelet_flags()
        },
        'node_pools': get_sample_node_pools(os_type)
    }

    with open(output_file, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    return output_file


def get_cluster_kubelet_flags():
    return {
        '--address': '0.0.0.0',
        '--anonymous-auth': 'false',
        '--authentication-token-webhook': 'true',
        '--authorization-mode': 'Webhook',
        '--cgroups-per-qos': 'true',
        '--client-ca-file': '/etc/kubernetes/certs/ca.crt',
        '--cluster-dns': '10.0.0.10',
        '--cluster-domain': 'cluster.local',
        '--enforce-node-allocatable': 'pods',
        '--event-qps': '0',
        '--eviction-hard': 'memory.available<750Mi,nodefs.available<10%,nodefs.inodesFree<5%',
        '--feature-gates': 'RotateKubeletServerCertificate=true',
        '--image-gc-high-threshold': '85',
        '--image-gc-low-threshold': '80',
        '--kube-reserved': 'cpu=100m,memory=1638Mi',
        '--max-pods': '110',
        '--node-status-update-frequency': '10s',
        '--pod-manifest-path': '/etc/kubernetes/manifests',
        '--pod-max-pids': '-1',
        '--protect-kernel-defaults': 'true',
        '--read-only-port': '0',
        '--resolv-conf': '/etc/resolv.conf',
        '--rotate-certificates': 'true',
        '--streaming-connection-idle-timeout': '4h0m0s',
        '--tls-cert-file': '/etc/kubernetes/certs/kubeletserver.crt',
        '--tls-private-key-file': '/etc/kubernetes/certs/kubeletserver.key',
    }


def get_sample_node_pools(os_type):
    if os_type == 'windows':
        return [
            {
                'name': 'win1',
                'os_type': 'windows',
                'kubelet_config_file': False,
                'kubelet_flags': {
                    '--max-pods': '30',
                    '--resolv-conf': '""',
                    '--cgroups-per-qos': 'false',
                    '--enforce-node-allocatable': '""'
                }
            }
        ]
    return [
        {
            'name': 'nodepool1',
            'os_type': 'linux',
            'kubelet_config_file': True,
            'kubelet_flags': {
                '--system-reserved': 'cpu=2,memory=1Gi'
            },
            'custom_kubelet_config': {
                'cpuManagerPolicy': 'static',
                'cpuCfsQuota': False,
                'cpuCfsQuotaPeriod': '200ms',
                'imageGcHighThreshold': 90,
                'imageGcLowThreshold': 70,
                'topologyManagerPolicy': 'best-effort',
                'allowedUnsafeSysctls': ['kernel.msg*', 'net.ipv4.route.min_pmtu'],
                'failSwapOn': False,
                'containerLogMaxSizeMB': 50,
                'containerLogMaxFiles': 5,
                'podMaxPids': 4096
            },
            'custom_os_config': {
                'sysctls': {
                    'net.core.somaxconn': '32768',
                    'vm.max_map_count': '262144'
                },
                'transparentHugePageEnabled': 'never',
                'transparentHugePageDefrag': 'defer+madvise'
            }
        }
    ]
