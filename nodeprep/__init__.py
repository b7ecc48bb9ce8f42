from .errors import NodePrepError, ParseError, SchemaError
from .kubelet import build_kubelet_configuration, get_kubelet_config_file_content
from .models import (CustomKubeletConfig, CustomOSConfig, KubeletConfiguration,
                     NodePool)
from .sysctl import get_sysctl_config_file_content

__all__ = [
    'NodePrepError',
    'ParseError',
    'SchemaError',
    'CustomKubeletConfig',
    'CustomOSConfig',
    'KubeletConfiguration',
    'NodePool',
    'build_kubelet_configuration',
    'get_kubelet_config_file_content',
    'get_sysctl_config_file_content',
]
