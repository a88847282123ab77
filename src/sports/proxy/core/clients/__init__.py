from sports.proxy.core.clients.backend import DomainBackendClient
from sports.proxy.core.clients.loader import load_and_register_clients
from sports.proxy.core.clients.registry import ClientsRegistry, ToolBackend

__all__ = ["DomainBackendClient", "load_and_register_clients", "ClientsRegistry", "ToolBackend"]
