"""Providers de sub-rede.

- LookupSubnetProvider: importa uma sub-rede existente pelo id. Recomendado
  quando o id da sub-rede secundária já é conhecido, pois evita criação.
- DirectSubnetProvider: sub-rede já construída.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from stratus_blueprints.core.resources.context import ResourceContext
from stratus_blueprints.core.resources.provider import DirectProvider, LookupProvider
from stratus_blueprints.core.resources.types import Subnet, SubnetTier


class LookupSubnetProvider(LookupProvider):
    kind = "subnet"

    def lookup(self, ctx: ResourceContext) -> Optional[Subnet]:
        handle = ctx.backend.lookup_subnet(self.identifier)
        if handle is None:
            return None
        return Subnet(
            handle=handle,
            zone=handle.attr("zone"),
            zone_index=-1,
            tier=SubnetTier(handle.attr("tier", SubnetTier.PRIVATE.value)),
            cidr=handle.attr("cidr"),
        )


@dataclass(frozen=True)
class DirectSubnetProvider(DirectProvider):
    """Sub-rede já realizada, entregue sem chamadas ao backend."""

    def __post_init__(self) -> None:
        if not isinstance(self.value, Subnet):
            raise TypeError("DirectSubnetProvider expects a Subnet")
