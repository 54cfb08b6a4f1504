# src/stratus_blueprints/core/resources/types.py
"""
Tipos canônicos de recursos realizados.

Este módulo define as estruturas imutáveis que representam recursos de
infraestrutura depois de criados ou localizados pelo backend de
provisionamento.

Componentes:
    - ResourceKind: classificação semântica do recurso
    - ResourceHandle: referência opaca devolvida pelo backend
    - Subnet: sub-rede realizada, pertencente a exatamente uma zona
    - Network: rede realizada com suas sub-redes indexadas por zona

Invariantes:
    - Instâncias nunca são alteradas após criadas (frozen)
    - `depends_on` de um handle lista apenas ids de recursos que precisam
      existir antes dele
    - Sub-redes públicas e privadas são alinhadas por índice à lista de zonas
      da rede

Limites explícitos:
    - Não realiza chamadas ao backend
    - Não calcula faixas de endereço
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple


class ResourceKind(str, Enum):
    """
    Tipos semânticos de recursos provisionados.

    Os valores são strings para facilitar serialização em JSON e
    persistência no manifest do build.
    """
    NETWORK = "network"
    SUBNET = "subnet"
    ADDRESS_BLOCK = "address_block"
    ROLE = "role"
    BUCKET = "bucket"
    TAG = "tag"


class SubnetTier(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class ResourceHandle:
    """
    Referência opaca a um objeto de infraestrutura no backend.

    Campos:
        - kind: tipo semântico do recurso
        - resource_id: identificador atribuído pelo backend (ex.: vpc-0001)
        - logical_id: identificador lógico escolhido pelo blueprint
        - attributes: parâmetros efetivos de criação (cidr, zona, tags...)
        - depends_on: ids de recursos que precisam existir antes deste
        - external: True quando o recurso foi localizado (lookup), não criado
    """
    kind: ResourceKind
    resource_id: str
    logical_id: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    depends_on: Tuple[str, ...] = ()
    external: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "depends_on", tuple(self.depends_on))

    def attr(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)


@dataclass(frozen=True)
class Subnet:
    """Sub-rede realizada. Cada sub-rede possui uma única faixa contígua."""
    handle: ResourceHandle
    zone: str
    zone_index: int
    tier: SubnetTier
    cidr: str
    ipv6_cidr: Optional[str] = None

    @property
    def subnet_id(self) -> str:
        return self.handle.resource_id


@dataclass(frozen=True)
class Network:
    """
    Rede realizada e suas sub-redes.

    `secondary_subnets` é indexado pelo índice da zona, pois zonas sem faixa
    secundária declarada não recebem sub-rede. O mapeamento é somente leitura.
    """
    handle: ResourceHandle
    zones: Tuple[str, ...]
    public_subnets: Tuple[Subnet, ...] = ()
    private_subnets: Tuple[Subnet, ...] = ()
    secondary_subnets: Mapping[int, Subnet] = field(default_factory=dict)
    address_blocks: Tuple[ResourceHandle, ...] = ()
    looked_up: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "secondary_subnets", MappingProxyType(dict(self.secondary_subnets)))

    @property
    def network_id(self) -> str:
        return self.handle.resource_id

    @property
    def cidr(self) -> Optional[str]:
        return self.handle.attr("cidr")

    @property
    def subnets(self) -> List[Subnet]:
        """Sub-redes públicas seguidas das privadas, em ordem de zona."""
        return [*self.public_subnets, *self.private_subnets]
