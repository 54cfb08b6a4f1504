# src/stratus_blueprints/backend/__init__.py
"""
Backend de provisionamento.

O backend real (nuvem) é um colaborador externo que implementa
`ProvisioningBackend`. `InMemoryBackend` é a implementação determinística
usada em dry runs e testes.
"""

from .base import BackendConflictError, NetworkAllocation, ProvisioningBackend
from .memory import InMemoryBackend

__all__ = [
    "ProvisioningBackend",
    "NetworkAllocation",
    "BackendConflictError",
    "InMemoryBackend",
]
