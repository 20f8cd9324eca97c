from .client import RelayClient
from .routing import RelayRoutingError, build_upstream_request

__all__ = ['RelayClient', 'RelayRoutingError', 'build_upstream_request']
