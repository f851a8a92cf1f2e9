from calamar.networks.registry import Network, NetworkRegistry, build_network

__all__ = ["Network", "NetworkRegistry", "build_network"]
