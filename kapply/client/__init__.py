"""Cluster collaborators: REST mapping and object reads.

Submodules:
    interfaces -- ResourceMapping and the ClusterReader / RESTMapper / StatusComputer contracts.
    mapper     -- StaticRESTMapper and the discovery-backed DiscoveryRESTMapper.
    kube       -- KubernetesClusterReader over kubernetes-asyncio.
"""

from kapply.client.interfaces import ClusterReader, ResourceMapping, RESTMapper, StatusComputer
from kapply.client.kube import KubernetesClusterReader, load_api_client
from kapply.client.mapper import DEFAULT_MAPPINGS, DiscoveryRESTMapper, StaticRESTMapper

__all__ = [
    "ClusterReader",
    "DEFAULT_MAPPINGS",
    "DiscoveryRESTMapper",
    "KubernetesClusterReader",
    "RESTMapper",
    "ResourceMapping",
    "StaticRESTMapper",
    "StatusComputer",
    "load_api_client",
]
