from .config_init import initialize_config
from .topology_config import TopologyConfig

__all__ = ["TopologyConfig", "initialize_config"]
