# src/stratus_blueprints/backend/memory.py
"""
Backend de provisionamento em memória (determinístico).

Implementa o contrato `ProvisioningBackend` sem acesso a nuvem, para dry
runs e testes. Ids são sequenciais por prefixo (`vpc-0001`,
`subnet-0003`, ...), de modo que o mesmo blueprint sempre produz os
mesmos ids.

Comportamento simulado:
    - A rede padrão da conta/região existe desde a construção
    - No modo legado a faixa primária é dividida em `2 * zonas` blocos
      iguais: blocos públicos primeiro, depois os privados
    - Blocos IPv6 são alocados pelo provedor em /56 sequenciais
    - Sub-redes sobrepostas na mesma rede são recusadas

Limites explícitos:
    - Não simula latência, quotas nem falhas transitórias
    - Não persiste nada entre instâncias
"""

from __future__ import annotations

import ipaddress
import math
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from stratus_blueprints.core.resources.types import ResourceHandle, ResourceKind

from .base import BackendConflictError, NetworkAllocation


DEFAULT_ZONES = ("us-west-2a", "us-west-2b", "us-west-2c")
DEFAULT_NETWORK_CIDR = "172.31.0.0/16"
IPV6_POOL = "2600:1f13::/40"
IPV6_ALLOCATION_PREFIX = 56


def _split_evenly(cidr: str, count: int) -> List[str]:
    network = ipaddress.ip_network(cidr, strict=False)
    bits = max(0, math.ceil(math.log2(count))) if count > 1 else 0
    new_prefix = network.prefixlen + bits
    if new_prefix > network.max_prefixlen - 4:
        raise BackendConflictError(f"{cidr} is too small for {count} subnets")
    return [str(s) for s in list(network.subnets(new_prefix=new_prefix))[:count]]


class InMemoryBackend:
    """Backend determinístico que registra cada chamada recebida."""

    def __init__(
        self,
        *,
        zones: Sequence[str] = DEFAULT_ZONES,
        seed_default_network: bool = True,
    ):
        self.zones: Tuple[str, ...] = tuple(zones)
        self.created: List[ResourceHandle] = []
        self.calls: List[Dict[str, Any]] = []

        self._counters: Dict[str, int] = {}
        self._networks: Dict[str, NetworkAllocation] = {}
        self._blocks: Dict[str, List[str]] = {}
        self._subnets: Dict[str, ResourceHandle] = {}
        self._ipv6: Dict[str, List[str]] = {}
        self._roles: Dict[str, ResourceHandle] = {}
        self._buckets: Dict[str, ResourceHandle] = {}
        self._known: Set[str] = set()
        self._external: Set[str] = set()
        self._ipv6_next = 0
        self.default_network_id: Optional[str] = None

        if seed_default_network:
            allocation = self.seed_network(cidr=DEFAULT_NETWORK_CIDR, zones=self.zones, is_default=True)
            self.default_network_id = allocation.handle.resource_id

    # -----------------------------
    # Helpers internos
    # -----------------------------
    def _next_id(self, prefix: str) -> str:
        n = self._counters.get(prefix, 0) + 1
        self._counters[prefix] = n
        return f"{prefix}-{n:04d}"

    def _record(self, op: str, **params: Any) -> None:
        self.calls.append({"op": op, **params})

    def _add(self, handle: ResourceHandle) -> ResourceHandle:
        self._known.add(handle.resource_id)
        if handle.external:
            self._external.add(handle.resource_id)
        else:
            self.created.append(handle)
        return handle

    def _require_network(self, network_id: str) -> NetworkAllocation:
        if network_id not in self._networks:
            raise BackendConflictError(f"Unknown network: {network_id}")
        return self._networks[network_id]

    def _allocate_network(
        self,
        *,
        logical_id: str,
        cidr: str,
        zones: Sequence[str],
        external: bool,
        extra: Optional[Dict[str, Any]] = None,
    ) -> NetworkAllocation:
        cidr = str(ipaddress.ip_network(cidr, strict=False))
        network_id = self._next_id("vpc")
        attributes = {"cidr": cidr, "zones": list(zones)}
        attributes.update(extra or {})
        handle = self._add(ResourceHandle(
            kind=ResourceKind.NETWORK,
            resource_id=network_id,
            logical_id=logical_id,
            attributes=attributes,
            external=external,
        ))
        self._blocks[network_id] = [cidr]

        blocks = _split_evenly(cidr, 2 * len(zones)) if zones else []
        public: List[ResourceHandle] = []
        private: List[ResourceHandle] = []
        for i, zone in enumerate(zones):
            public.append(self._add_subnet(
                f"{logical_id}/PublicSubnet{i + 1}", network_id, zone, blocks[i],
                tier="public", depends_on=(network_id,), external=external,
            ))
        for i, zone in enumerate(zones):
            private.append(self._add_subnet(
                f"{logical_id}/PrivateSubnet{i + 1}", network_id, zone, blocks[len(zones) + i],
                tier="private", depends_on=(network_id,), external=external,
            ))

        allocation = NetworkAllocation(
            handle=handle,
            zones=tuple(zones),
            public_subnets=tuple(public),
            private_subnets=tuple(private),
        )
        self._networks[network_id] = allocation
        return allocation

    def _add_subnet(
        self,
        logical_id: str,
        network_id: str,
        zone: str,
        cidr: str,
        *,
        tier: str,
        depends_on: Sequence[str],
        external: bool = False,
    ) -> ResourceHandle:
        candidate = ipaddress.ip_network(cidr, strict=False)
        blocks = [ipaddress.ip_network(b) for b in self._blocks.get(network_id, [])]
        if not any(candidate.version == b.version and candidate.subnet_of(b) for b in blocks):
            raise BackendConflictError(f"{cidr} is outside the address blocks of {network_id}")
        for other in self._subnets.values():
            if other.attr("network_id") != network_id:
                continue
            if candidate.overlaps(ipaddress.ip_network(other.attr("cidr"))):
                raise BackendConflictError(f"{cidr} overlaps subnet {other.resource_id}")

        handle = self._add(ResourceHandle(
            kind=ResourceKind.SUBNET,
            resource_id=self._next_id("subnet"),
            logical_id=logical_id,
            attributes={"network_id": network_id, "zone": zone, "cidr": str(candidate), "tier": tier},
            depends_on=tuple(depends_on),
            external=external,
        ))
        self._subnets[handle.resource_id] = handle
        return handle

    # -----------------------------
    # Seeds (infraestrutura pré-existente)
    # -----------------------------
    def seed_network(
        self,
        *,
        cidr: str,
        zones: Sequence[str],
        is_default: bool = False,
    ) -> NetworkAllocation:
        return self._allocate_network(
            logical_id="default-vpc" if is_default else "imported-vpc",
            cidr=cidr,
            zones=zones,
            external=True,
            extra={"is_default": is_default},
        )

    def seed_subnet(self, *, network_id: str, zone: str, cidr: str) -> ResourceHandle:
        self._require_network(network_id)
        return self._add_subnet(
            "imported-subnet", network_id, zone, cidr,
            tier="private", depends_on=(), external=True,
        )

    def seed_role(self, role_name: str) -> ResourceHandle:
        handle = self._add(ResourceHandle(
            kind=ResourceKind.ROLE,
            resource_id=f"arn:aws:iam::000000000000:role/{role_name}",
            logical_id=role_name,
            attributes={"role_name": role_name},
            external=True,
        ))
        self._roles[role_name] = handle
        return handle

    def external_ids(self) -> Set[str]:
        return set(self._external)

    def count_calls(self, op: str) -> int:
        return sum(1 for c in self.calls if c["op"] == op)

    # -----------------------------
    # Rede
    # -----------------------------
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
        used = list(zones)[:max_zones] if max_zones else list(zones)
        self._record("create_network", logical_id=logical_id, cidr=cidr, zones=used, dual_stack=dual_stack)
        return self._allocate_network(
            logical_id=logical_id,
            cidr=cidr,
            zones=used,
            external=False,
            extra={"dual_stack": dual_stack, "nat_gateways": nat_gateways},
        )

    def lookup_network(self, identifier: str) -> Optional[NetworkAllocation]:
        self._record("lookup_network", identifier=identifier)
        if identifier == "default":
            if self.default_network_id is None:
                return None
            return self._networks[self.default_network_id]
        return self._networks.get(identifier)

    def create_cidr_block(
        self,
        logical_id: str,
        network_id: str,
        *,
        cidr: Optional[str] = None,
        amazon_provided_ipv6: bool = False,
        depends_on: Sequence[str] = (),
    ) -> ResourceHandle:
        self._record("create_cidr_block", logical_id=logical_id, network_id=network_id,
                     cidr=cidr, amazon_provided_ipv6=amazon_provided_ipv6)
        self._require_network(network_id)

        if amazon_provided_ipv6:
            pool = ipaddress.IPv6Network(IPV6_POOL)
            size = 2 ** (128 - IPV6_ALLOCATION_PREFIX)
            block = ipaddress.IPv6Network(
                (int(pool.network_address) + self._ipv6_next * size, IPV6_ALLOCATION_PREFIX)
            )
            self._ipv6_next += 1
            allocated = str(block)
            self._ipv6.setdefault(network_id, [])
        else:
            if not cidr:
                raise BackendConflictError("cidr is required unless amazon_provided_ipv6 is set")
            candidate = ipaddress.ip_network(cidr, strict=False)
            for existing in self._blocks[network_id]:
                other = ipaddress.ip_network(existing)
                if other.version == candidate.version and candidate.overlaps(other):
                    raise BackendConflictError(f"{cidr} overlaps block {existing} of {network_id}")
            allocated = str(candidate)

        self._blocks[network_id].append(allocated)
        return self._add(ResourceHandle(
            kind=ResourceKind.ADDRESS_BLOCK,
            resource_id=self._next_id("vpc-cidr-assoc"),
            logical_id=logical_id,
            attributes={"network_id": network_id, "cidr": allocated, "ipv6": amazon_provided_ipv6},
            depends_on=tuple(depends_on),
        ))

    def create_subnet(
        self,
        logical_id: str,
        network_id: str,
        zone: str,
        cidr: str,
        *,
        depends_on: Sequence[str] = (),
    ) -> ResourceHandle:
        self._record("create_subnet", logical_id=logical_id, network_id=network_id, zone=zone, cidr=cidr)
        self._require_network(network_id)
        return self._add_subnet(logical_id, network_id, zone, cidr, tier="secondary", depends_on=depends_on)

    def associate_subnet_ipv6(
        self,
        subnet_id: str,
        ipv6_cidr: str,
        *,
        assign_on_creation: bool = True,
        depends_on: Sequence[str] = (),
    ) -> ResourceHandle:
        self._record("associate_subnet_ipv6", subnet_id=subnet_id, ipv6_cidr=ipv6_cidr)
        subnet = self._subnets.get(subnet_id)
        if subnet is None:
            raise BackendConflictError(f"Unknown subnet: {subnet_id}")
        network_id = subnet.attr("network_id")
        candidate = ipaddress.ip_network(ipv6_cidr)
        for existing in self._ipv6.get(network_id, []):
            if candidate.overlaps(ipaddress.ip_network(existing)):
                raise BackendConflictError(f"{ipv6_cidr} overlaps {existing} in {network_id}")
        self._ipv6.setdefault(network_id, []).append(str(candidate))

        return self._add(ResourceHandle(
            kind=ResourceKind.ADDRESS_BLOCK,
            resource_id=self._next_id("subnet-cidr-assoc"),
            logical_id=f"{subnet.logical_id}/Ipv6",
            attributes={
                "subnet_id": subnet_id,
                "cidr": str(candidate),
                "ipv6": True,
                "assign_on_creation": assign_on_creation,
            },
            depends_on=tuple(dict.fromkeys([subnet_id, *depends_on])),
        ))

    def tag(self, resource_id: str, key: str, value: str) -> ResourceHandle:
        self._record("tag", resource_id=resource_id, key=key, value=value)
        if resource_id not in self._known:
            raise BackendConflictError(f"Unknown resource: {resource_id}")
        return self._add(ResourceHandle(
            kind=ResourceKind.TAG,
            resource_id=self._next_id("tag"),
            logical_id=f"{resource_id}/{key}",
            attributes={"target": resource_id, "key": key, "value": value},
            depends_on=(resource_id,),
        ))

    def lookup_subnet(self, subnet_id: str) -> Optional[ResourceHandle]:
        self._record("lookup_subnet", subnet_id=subnet_id)
        return self._subnets.get(subnet_id)

    # -----------------------------
    # IAM / Storage
    # -----------------------------
    def create_role(
        self,
        logical_id: str,
        role_name: str,
        *,
        assumed_by: str,
        managed_policies: Sequence[str] = (),
        inline_policy: Optional[Dict[str, Any]] = None,
    ) -> ResourceHandle:
        self._record("create_role", logical_id=logical_id, role_name=role_name)
        if role_name in self._roles:
            raise BackendConflictError(f"Role already exists: {role_name}")
        handle = self._add(ResourceHandle(
            kind=ResourceKind.ROLE,
            resource_id=f"arn:aws:iam::000000000000:role/{role_name}",
            logical_id=logical_id,
            attributes={
                "role_name": role_name,
                "assumed_by": assumed_by,
                "managed_policies": list(managed_policies),
                "inline_policy": inline_policy,
            },
        ))
        self._roles[role_name] = handle
        return handle

    def lookup_role(self, role_name: str) -> Optional[ResourceHandle]:
        self._record("lookup_role", role_name=role_name)
        return self._roles.get(role_name)

    def create_bucket(
        self,
        logical_id: str,
        bucket_name: str,
        *,
        removal_policy: str = "retain",
    ) -> ResourceHandle:
        self._record("create_bucket", logical_id=logical_id, bucket_name=bucket_name)
        if bucket_name in self._buckets:
            raise BackendConflictError(f"Bucket already exists: {bucket_name}")
        handle = self._add(ResourceHandle(
            kind=ResourceKind.BUCKET,
            resource_id=f"arn:aws:s3:::{bucket_name}",
            logical_id=logical_id,
            attributes={"bucket_name": bucket_name, "removal_policy": removal_policy},
        ))
        self._buckets[bucket_name] = handle
        return handle

    def lookup_bucket(self, bucket_name: str) -> Optional[ResourceHandle]:
        self._record("lookup_bucket", bucket_name=bucket_name)
        return self._buckets.get(bucket_name)
