# src/stratus_blueprints/backend/base.py
"""
Contrato do backend de provisionamento.

O backend é um colaborador externo: cria e localiza objetos de
infraestrutura de forma síncrona e atômica (cada chamada ou sucede por
inteiro ou falha). Retries, quando existirem, são responsabilidade do
cliente do backend e não do motor de resolução.

Convenções:
    - Chamadas de criação devolvem `ResourceHandle`
    - Lookups devolvem None quando não existe correspondência
    - `depends_on` declara a ordem de criação exigida pelo backend
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set, Tuple, runtime_checkable

from stratus_blueprints.core.resources.types import ResourceHandle


class BackendConflictError(RuntimeError):
    """O backend recusou a criação (ex.: faixa sobreposta, rede inexistente)."""


@dataclass(frozen=True)
class NetworkAllocation:
    """
    Rede criada ou localizada pelo backend, com as sub-redes padrão.

    No modo legado o backend subdivide a faixa primária sozinho: uma
    sub-rede pública e uma privada por zona, alinhadas por índice a `zones`.
    """
    handle: ResourceHandle
    zones: Tuple[str, ...]
    public_subnets: Tuple[ResourceHandle, ...] = ()
    private_subnets: Tuple[ResourceHandle, ...] = ()


@runtime_checkable
class ProvisioningBackend(Protocol):
    created: List[ResourceHandle]
    calls: List[Dict[str, Any]]

    def external_ids(self) -> Set[str]:
        """Ids de recursos pré-existentes (não criados por este build)."""
        ...

    def create_network(
        self,
        logical_id: str,
        cidr: str,
        zones: Sequence[str],
        *,
        dual_stack: bool = False,
        max_zones: Optional[int] = None,
        nat_gateways: Optional[int] = None,
    ) -> NetworkAllocation:
        ...

    def lookup_network(self, identifier: str) -> Optional[NetworkAllocation]:
        ...

    def create_cidr_block(
        self,
        logical_id: str,
        network_id: str,
        *,
        cidr: Optional[str] = None,
        amazon_provided_ipv6: bool = False,
        depends_on: Sequence[str] = (),
    ) -> ResourceHandle:
        ...

    def create_subnet(
        self,
        logical_id: str,
        network_id: str,
        zone: str,
        cidr: str,
        *,
        depends_on: Sequence[str] = (),
    ) -> ResourceHandle:
        ...

    def associate_subnet_ipv6(
        self,
        subnet_id: str,
        ipv6_cidr: str,
        *,
        assign_on_creation: bool = True,
        depends_on: Sequence[str] = (),
    ) -> ResourceHandle:
        ...

    def tag(self, resource_id: str, key: str, value: str) -> ResourceHandle:
        ...

    def lookup_subnet(self, subnet_id: str) -> Optional[ResourceHandle]:
        ...

    def create_role(
        self,
        logical_id: str,
        role_name: str,
        *,
        assumed_by: str,
        managed_policies: Sequence[str] = (),
        inline_policy: Optional[Dict[str, Any]] = None,
    ) -> ResourceHandle:
        ...

    def lookup_role(self, role_name: str) -> Optional[ResourceHandle]:
        ...

    def create_bucket(
        self,
        logical_id: str,
        bucket_name: str,
        *,
        removal_policy: str = "retain",
    ) -> ResourceHandle:
        ...

    def lookup_bucket(self, bucket_name: str) -> Optional[ResourceHandle]:
        ...
