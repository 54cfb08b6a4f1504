# src/stratus_blueprints/core/resources/__init__.py
"""
# Resource Core: Stratus Blueprints

Este pacote define o **registro de recursos** de um build e os
**contratos de provider** usados para produzir recursos sob demanda.

## Componentes

- **types**
  - `ResourceKind`, `ResourceHandle`: referências devolvidas pelo backend
  - `Network`, `Subnet`: recursos de rede realizados (imutáveis)

- **provider**
  - `ResourceProvider` (Protocol): contrato `provide(ctx)`
  - `Provided`: recurso principal + sub-recursos a registrar
  - `DirectProvider`, `LookupProvider`

- **context**
  - `ResourceContext`: registro memoizado, reentrante, com detecção de ciclos

## Invariantes

- Cada nome é realizado no máximo uma vez por build
- Recursos realizados nunca são substituídos
- Ciclos de resolução falham antes de esgotar a pilha
"""

from .context import ResourceContext
from .provider import DEFAULT_IDENTIFIER, DirectProvider, LookupProvider, Provided, ResourceProvider
from .types import Network, ResourceHandle, ResourceKind, Subnet, SubnetTier

__all__ = [
    "ResourceContext",
    "ResourceProvider",
    "Provided",
    "DirectProvider",
    "LookupProvider",
    "DEFAULT_IDENTIFIER",
    "ResourceKind",
    "ResourceHandle",
    "Network",
    "Subnet",
    "SubnetTier",
]
