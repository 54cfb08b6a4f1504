"""Particionador de endereços (v1).

Funções puras, sem chamadas ao backend, que decidem as faixas de endereço
de uma rede e de suas sub-redes por zona de disponibilidade.

Estratégias (mantidas separadas):
- legado (família única): o particionador fornece apenas a faixa primária;
  o backend subdivide sozinho em uma sub-rede pública e uma privada por zona.
- faixa secundária: o chamador informa faixas exatas por zona (alinhadas por
  índice); nada é re-particionado. Zonas sem faixa são puladas.
- dual-stack: após o backend alocar o bloco IPv6 da rede, cada sub-rede
  recebe o bloco /64 de índice igual à sua posição na enumeração estável
  (todas as públicas por zona, depois todas as privadas por zona).

Princípios:
- Validar antes de agir: faixas inválidas falham antes de qualquer criação.
- Determinismo: a mesma ordem de sub-redes produz sempre a mesma atribuição.

Limites explícitos:
- NÃO cria recursos.
- NÃO unifica as estratégias legado e dual-stack.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, TypeVar, Union

from stratus_blueprints.core.exceptions import partition_exhausted


DEFAULT_PRIMARY_CIDR = "10.0.0.0/16"
IPV6_BLOCK_PREFIX = 64

T = TypeVar("T")
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


@dataclass(frozen=True)
class SecondarySubnetPlan:
    zone_index: int
    zone: str
    cidr: str


@dataclass(frozen=True)
class BlockAssignment:
    index: int
    key: str
    cidr: str


def _parse(cidr: str, *, field: str) -> IPNetwork:
    try:
        return ipaddress.ip_network(str(cidr).strip(), strict=False)
    except ValueError as e:
        raise partition_exhausted(f"malformed {field}", cidr=cidr, error=str(e)) from e


def legacy_primary_range(primary_cidr: Optional[str]) -> str:
    """Faixa primária do modo legado: a informada (validada) ou o default documentado."""
    if not primary_cidr:
        return DEFAULT_PRIMARY_CIDR
    network = _parse(primary_cidr, field="primary range")
    if network.version != 4:
        raise partition_exhausted("primary range must be IPv4", cidr=primary_cidr)
    return primary_cidr


def plan_secondary_subnets(
    secondary_cidr: str,
    subnet_cidrs: Optional[Sequence[Optional[str]]],
    zones: Sequence[str],
    *,
    primary_cidr: Optional[str] = None,
) -> List[SecondarySubnetPlan]:
    """
    Planeja uma sub-rede secundária por zona a partir de faixas explícitas.

    A entrada `subnet_cidrs[i]` pertence a `zones[i]`. Entradas vazias ou
    None pulam a zona (nenhuma sub-rede, sem erro). Com `primary_cidr`, a
    faixa secundária não pode sobrepor a faixa primária da rede.

    Raises:
        PartitionRangeExhaustedError: Se houver faixas além do número de zonas,
            faixas malformadas, fora da faixa secundária ou sobrepostas, ou se a
            faixa secundária sobrepor a primária.
    """
    parent = _parse(secondary_cidr, field="secondary range")
    if primary_cidr:
        primary = _parse(primary_cidr, field="primary range")
        if primary.version == parent.version and parent.overlaps(primary):
            raise partition_exhausted(
                "secondary range overlaps the primary range",
                secondary_cidr=secondary_cidr,
                primary_cidr=primary_cidr,
            )
    entries = list(subnet_cidrs or [])

    extra = [c for c in entries[len(zones):] if c]
    if extra:
        raise partition_exhausted(
            "more secondary subnet ranges than availability zones",
            zones=len(zones),
            ranges=len(entries),
        )

    plans: List[SecondarySubnetPlan] = []
    taken: List[IPNetwork] = []
    for i, zone in enumerate(zones):
        raw = entries[i] if i < len(entries) else None
        if not raw:
            continue
        candidate = _parse(raw, field="secondary subnet range")
        if candidate.version != parent.version or not candidate.subnet_of(parent):
            raise partition_exhausted(
                "secondary subnet range outside the secondary range",
                cidr=raw,
                secondary_cidr=secondary_cidr,
                zone_index=i,
            )
        for other in taken:
            if candidate.overlaps(other):
                raise partition_exhausted(
                    "overlapping secondary subnet ranges",
                    cidr=raw,
                    overlaps=str(other),
                    zone_index=i,
                )
        taken.append(candidate)
        plans.append(SecondarySubnetPlan(zone_index=i, zone=zone, cidr=str(candidate)))
    return plans


def dual_stack_subnet_order(public: Sequence[T], private: Sequence[T]) -> List[T]:
    """Enumeração estável: públicas por zona, depois privadas por zona."""
    return [*public, *private]


def assign_ipv6_blocks(
    subnet_keys: Sequence[str],
    allocated_range: str,
    new_prefix: int = IPV6_BLOCK_PREFIX,
) -> List[BlockAssignment]:
    """
    Divide `allocated_range` em blocos /new_prefix e atribui o bloco i à sub-rede i.

    Blocos são disjuntos e de mesmo tamanho; o índice de bloco cresce com a
    posição da sub-rede em `subnet_keys`.

    Raises:
        ValueError: Se `subnet_keys` tiver chaves repetidas.
        PartitionRangeExhaustedError: Se a faixa for malformada, o prefixo for
            inválido ou houver menos blocos do que sub-redes.
    """
    keys = list(subnet_keys)
    if len(set(keys)) != len(keys):
        raise ValueError("subnet keys must be unique")

    network = _parse(allocated_range, field="allocated range")
    if not network.prefixlen <= new_prefix <= network.max_prefixlen:
        raise partition_exhausted(
            "block prefix incompatible with allocated range",
            cidr=allocated_range,
            new_prefix=new_prefix,
        )

    available = 2 ** (new_prefix - network.prefixlen)
    if len(keys) > available:
        raise partition_exhausted(
            "allocated range has fewer blocks than subnets",
            cidr=allocated_range,
            blocks=available,
            subnets=len(keys),
        )

    size = 2 ** (network.max_prefixlen - new_prefix)
    base = int(network.network_address)
    out: List[BlockAssignment] = []
    for i, key in enumerate(keys):
        block = type(network)((base + i * size, new_prefix))
        out.append(BlockAssignment(index=i, key=key, cidr=str(block)))
    return out


def blocks_overlap(cidrs: Iterable[str]) -> bool:
    nets = [ipaddress.ip_network(c, strict=False) for c in cidrs]
    for i, a in enumerate(nets):
        for b in nets[i + 1:]:
            if a.version == b.version and a.overlaps(b):
                return True
    return False
