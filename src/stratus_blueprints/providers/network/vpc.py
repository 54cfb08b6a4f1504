"""Provider construtivo de rede: orquestrador de provisionamento (v1).

Responsabilidades:
- Localizar uma rede existente quando a NetworkSpec traz identificador.
- Criar a rede no modo legado (família única) ou dual-stack.
- Alocar a faixa secundária e as sub-redes secundárias por zona, quando pedida.
- Registrar cada sub-rede no ResourceContext sob nomes derivados.

Máquina de estados:
    uninitialized -> resolving -> (lookup_only | creating)
        -> secondary_partitioning [opcional] -> ready

Ordem de criação declarada ao backend (`depends_on`):
- bloco secundário depois da rede
- sub-redes secundárias depois do bloco secundário
- tags depois da sub-rede marcada
- associação IPv6 de cada sub-rede depois do bloco IPv6 da rede

Nomes derivados registrados:
- `<rede>-public-subnet-<i>` / `<rede>-private-subnet-<i>` (i = índice da zona)
- `secondary-cidr-subnet-<i>`

Limites explícitos:
- NÃO cai para criação quando o lookup falha.
- NÃO re-particiona faixas secundárias informadas.
- `lookup_only` é terminal: faixa secundária pedida para rede localizada é
  ignorada com warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from stratus_blueprints.backend.base import NetworkAllocation
from stratus_blueprints.core.exceptions import lookup_not_found
from stratus_blueprints.core.resources.context import ResourceContext
from stratus_blueprints.core.resources.provider import DirectProvider, Provided, ResourceProvider
from stratus_blueprints.core.resources.types import Network, ResourceHandle, Subnet, SubnetTier

from .partition import (
    SecondarySubnetPlan,
    assign_ipv6_blocks,
    dual_stack_subnet_order,
    legacy_primary_range,
    plan_secondary_subnets,
)
from .spec import NetworkSpec


INTERNAL_ELB_TAG = ("kubernetes.io/role/internal-elb", "1")


class NetworkState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RESOLVING = "resolving"
    LOOKUP_ONLY = "lookup_only"
    CREATING = "creating"
    SECONDARY_PARTITIONING = "secondary_partitioning"
    READY = "ready"


def public_subnet_name(network_name: str, zone_index: int) -> str:
    return f"{network_name}-public-subnet-{zone_index}"


def private_subnet_name(network_name: str, zone_index: int) -> str:
    return f"{network_name}-private-subnet-{zone_index}"


def secondary_subnet_name(zone_index: int) -> str:
    return f"secondary-cidr-subnet-{zone_index}"


def _subnets(handles: Sequence[ResourceHandle], tier: SubnetTier) -> Tuple[Subnet, ...]:
    return tuple(
        Subnet(handle=h, zone=h.attr("zone"), zone_index=i, tier=tier, cidr=h.attr("cidr"))
        for i, h in enumerate(handles)
    )


def _network_from(allocation: NetworkAllocation, *, looked_up: bool) -> Network:
    return Network(
        handle=allocation.handle,
        zones=tuple(allocation.zones),
        public_subnets=_subnets(allocation.public_subnets, SubnetTier.PUBLIC),
        private_subnets=_subnets(allocation.private_subnets, SubnetTier.PRIVATE),
        looked_up=looked_up,
    )


@dataclass
class VpcProvider:
    """Resolve a rede do blueprint: lookup ou criação, mais particionamento secundário."""

    spec: NetworkSpec = field(default_factory=NetworkSpec)
    state: NetworkState = field(default=NetworkState.UNINITIALIZED, init=False)
    history: List[NetworkState] = field(default_factory=lambda: [NetworkState.UNINITIALIZED], init=False)
    _failure: Optional[Exception] = field(default=None, init=False, repr=False, compare=False)

    def _enter(self, ctx: ResourceContext, name: str, state: NetworkState) -> None:
        self.state = state
        self.history.append(state)
        ctx.log(resource=name, level="info", message="network state", state=state.value)

    def provide(self, ctx: ResourceContext) -> Provided:
        """
        Executa a máquina de estados uma única vez.

        Uma falha deixa o provider no estado em que parou (`history` mostra
        onde); nova chamada relança a mesma exceção, sem repetir chamadas ao
        backend.
        """
        if self._failure is not None:
            raise self._failure
        if self.state != NetworkState.UNINITIALIZED:
            raise RuntimeError(f"VpcProvider already provided (state={self.state.value})")
        if ctx.backend is None:
            raise RuntimeError("ResourceContext.backend is required to provide a network")

        name = ctx.current_resource() or "vpc"
        try:
            return self._provide(ctx, name)
        except Exception as e:
            self._failure = e
            raise

    def _provide(self, ctx: ResourceContext, name: str) -> Provided:
        logical_id = f"{ctx.meta.get('blueprint_id', ctx.build_id)}-vpc"
        self._enter(ctx, name, NetworkState.RESOLVING)

        if self.spec.is_lookup:
            network = self._lookup(ctx, name)
            if self.spec.wants_secondary:
                ctx.add_warning(resource=name, message="secondary range ignored for looked-up network")
        else:
            zones = list(ctx.zones)
            if not zones:
                raise ValueError("ResourceContext.zones must not be empty when creating a network")
            if self.spec.is_dual_stack:
                zones = zones[: self.spec.max_zones]

            primary_cidr = legacy_primary_range(self.spec.primary_cidr)
            plan: List[SecondarySubnetPlan] = []
            if self.spec.wants_secondary:
                plan = plan_secondary_subnets(
                    self.spec.secondary_cidr,
                    self.spec.secondary_subnet_cidrs,
                    zones,
                    primary_cidr=primary_cidr,
                )

            self._enter(ctx, name, NetworkState.CREATING)
            if self.spec.is_dual_stack:
                network = self._create_dual_stack(ctx, logical_id, primary_cidr, zones)
            else:
                network = self._create_legacy(ctx, logical_id, primary_cidr, zones)

            if self.spec.wants_secondary:
                self._enter(ctx, name, NetworkState.SECONDARY_PARTITIONING)
                network = self._create_secondary(ctx, logical_id, network, plan)

        self._enter(ctx, name, NetworkState.READY)
        return Provided(resource=network, sub_resources=self._derived(name, network))

    # -----------------------------
    # Estados
    # -----------------------------
    def _lookup(self, ctx: ResourceContext, name: str) -> Network:
        self._enter(ctx, name, NetworkState.LOOKUP_ONLY)
        allocation = ctx.backend.lookup_network(self.spec.network_id)
        if allocation is None:
            raise lookup_not_found(kind="network", identifier=self.spec.network_id, name=name)
        ctx.log(resource=name, level="info", message="network looked up",
                identifier=self.spec.network_id, network_id=allocation.handle.resource_id)
        return _network_from(allocation, looked_up=True)

    def _create_legacy(
        self, ctx: ResourceContext, logical_id: str, cidr: str, zones: List[str]
    ) -> Network:
        # o backend subdivide a faixa: uma pública e uma privada por zona
        allocation = ctx.backend.create_network(logical_id, cidr, zones)
        return _network_from(allocation, looked_up=False)

    def _create_dual_stack(
        self, ctx: ResourceContext, logical_id: str, cidr: str, zones: List[str]
    ) -> Network:
        allocation = ctx.backend.create_network(
            logical_id,
            cidr,
            zones,
            dual_stack=True,
            max_zones=self.spec.max_zones,
            nat_gateways=self.spec.nat_gateways,
        )
        network = _network_from(allocation, looked_up=False)

        ipv6_block = ctx.backend.create_cidr_block(
            f"{logical_id}-CIDR6",
            network.network_id,
            amazon_provided_ipv6=True,
            depends_on=(network.network_id,),
        )

        ordered = dual_stack_subnet_order(network.public_subnets, network.private_subnets)
        assignments = assign_ipv6_blocks([s.subnet_id for s in ordered], ipv6_block.attr("cidr"))

        updated: Dict[str, Subnet] = {}
        for subnet, assignment in zip(ordered, assignments):
            ctx.backend.associate_subnet_ipv6(
                subnet.subnet_id,
                assignment.cidr,
                assign_on_creation=True,
                depends_on=(ipv6_block.resource_id,),
            )
            updated[subnet.subnet_id] = replace(subnet, ipv6_cidr=assignment.cidr)

        return replace(
            network,
            public_subnets=tuple(updated[s.subnet_id] for s in network.public_subnets),
            private_subnets=tuple(updated[s.subnet_id] for s in network.private_subnets),
            address_blocks=network.address_blocks + (ipv6_block,),
        )

    def _create_secondary(
        self,
        ctx: ResourceContext,
        logical_id: str,
        network: Network,
        plan: List[SecondarySubnetPlan],
    ) -> Network:
        block = ctx.backend.create_cidr_block(
            f"{logical_id}-secondaryCidr",
            network.network_id,
            cidr=self.spec.secondary_cidr,
            depends_on=(network.network_id,),
        )

        secondary: Dict[int, Subnet] = {}
        for p in plan:
            handle = ctx.backend.create_subnet(
                f"{logical_id}-private-subnet-{p.zone_index}",
                network.network_id,
                p.zone,
                p.cidr,
                depends_on=(block.resource_id,),
            )
            secondary[p.zone_index] = Subnet(
                handle=handle,
                zone=p.zone,
                zone_index=p.zone_index,
                tier=SubnetTier.SECONDARY,
                cidr=p.cidr,
            )

        blueprint_id = ctx.meta.get("blueprint_id", ctx.build_id)
        for zone_index, subnet in secondary.items():
            ctx.backend.tag(subnet.subnet_id, *INTERNAL_ELB_TAG)
            ctx.backend.tag(subnet.subnet_id, "Name", f"{blueprint_id}-PrivateSubnet-{zone_index}")

        return replace(
            network,
            secondary_subnets=secondary,
            address_blocks=network.address_blocks + (block,),
        )

    # -----------------------------
    # Sub-recursos derivados
    # -----------------------------
    def _derived(self, name: str, network: Network) -> List[Tuple[str, ResourceProvider]]:
        out: List[Tuple[str, ResourceProvider]] = []
        for s in network.public_subnets:
            out.append((public_subnet_name(name, s.zone_index), DirectProvider(s)))
        for s in network.private_subnets:
            out.append((private_subnet_name(name, s.zone_index), DirectProvider(s)))
        for zone_index, s in sorted(network.secondary_subnets.items()):
            out.append((secondary_subnet_name(zone_index), DirectProvider(s)))
        return out


@dataclass(frozen=True)
class DirectVpcProvider(DirectProvider):
    """Rede já realizada fora do build, entregue sem chamadas ao backend."""

    def __post_init__(self) -> None:
        if not isinstance(self.value, Network):
            raise TypeError("DirectVpcProvider expects a Network")
