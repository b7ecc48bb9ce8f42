import json

import pytest

from nodeprep.artifacts import KUBELET_CONFIG_FILE_PATH, SYSCTL_CONFIG_FILE_PATH, render_node_pool
from nodeprep.config import get_node_pools
from nodeprep.errors import ParseError
from tests.utils.config_helpers import create_test_config


@pytest.mark.scenarios
class TestNodePoolScenarios:
    """Test realistic node pool setups end to end through the library"""

    def test_cpu_pinning_pool(self):
        """Test a latency sensitive pool with static CPU management"""
        config = create_test_config(node_pools=[
            {
                'name': 'latency',
                'kubelet_flags': {'--kube-reserved': 'cpu=500m,memory=2Gi'},
                'custom_kubelet_config': {
                    'cpuManagerPolicy': 'static',
                    'topologyManagerPolicy': 'single-numa-node',
                    'cpuCfsQuota': False,
                }
            }
        ])
        pool = get_node_pools(config)[0]
        document = json.loads(render_node_pool(pool)[KUBELET_CONFIG_FILE_PATH])

        assert document["cpuManagerPolicy"] == "static"
        assert document["topologyManagerPolicy"] == "single-numa-node"
        assert document["cpuCFSQuota"] is False
        assert document["kubeReserved"] == {"cpu": "500m", "memory": "2Gi"}
        assert document["maxPods"] == 110
        keys = list(document)
        assert keys.index("cpuManagerPolicy") < keys.index("topologyManagerPolicy") < keys.index("maxPods")

    def test_database_pool_os_tuning(self):
        """Test a pool that raises kernel limits for a database"""
        config = create_test_config(node_pools=[
            {
                'name': 'db',
                'custom_os_config': {
                    'sysctls': {
                        'vm.max_map_count': 262144,
                        'net.ipv4.tcp_max_syn_backlog': 65536,
                        'fs.file-max': 2097152,
                    },
                    'transparentHugePageEnabled': 'never',
                    'transparentHugePageDefrag': 'never',
                }
            }
        ])
        pool = get_node_pools(config)[0]
        lines = render_node_pool(pool)[SYSCTL_CONFIG_FILE_PATH].splitlines()

        assert lines[8] == "net.ipv4.tcp_max_syn_backlog=65536"
        assert lines[10:] == ["fs.file-max=2097152", "vm.max_map_count=262144"]

    def test_mixed_os_cluster(self):
        """Test Linux and Windows pools sharing cluster flags"""
        config = create_test_config(node_pools=[
            {'name': 'linux1'},
            {'name': 'win1', 'os_type': 'windows', 'kubelet_config_file': False,
             'kubelet_flags': {'--max-pods': 30}},
        ])
        linux, windows = (render_node_pool(pool) for pool in get_node_pools(config))

        assert KUBELET_CONFIG_FILE_PATH in linux
        assert len(windows) == 1
        assert '"--max-pods=30"' in next(iter(windows.values()))

    def test_bad_cluster_flag_fails_every_pool(self):
        """Test a malformed cluster flag surfaces as ParseError"""
        config = create_test_config(node_pools=[{'name': 'a'}, {'name': 'b'}])
        config['cluster']['kubelet_flags']['--max-pods'] = 'one-hundred'

        for pool in get_node_pools(config):
            with pytest.raises(ParseError, match="--max-pods"):
                render_node_pool(pool)
