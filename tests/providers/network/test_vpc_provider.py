# tests/providers/network/test_vpc_provider.py
"""
Testes do orquestrador de provisionamento de rede (VpcProvider).

Este módulo valida a máquina de estados do provider e as chamadas feitas
ao backend em memória:
- criação legado (família única) com sub-redes padrão por zona
- lookup da rede padrão ou de uma rede por id, sem caminhos de criação
- particionamento secundário com dependências de criação e tags
- dual-stack com atribuição sequencial de blocos IPv6 /64
- validação das faixas antes de qualquer chamada de criação

Decisões arquiteturais:
    - O InMemoryBackend é semeado com a rede padrão (vpc-0001 e
      subnet-0001..0006); a primeira rede criada é vpc-0002
    - Ids são determinísticos, então os testes comparam ids exatos

Limites explícitos:
    - Não valida o particionador isoladamente (ver test_partition.py)
"""

import pytest

from stratus_blueprints.backend.memory import InMemoryBackend
from stratus_blueprints.core.engine.planner import plan_creation_order
from stratus_blueprints.core.exceptions import LookupNotFoundError, PartitionRangeExhaustedError
from stratus_blueprints.core.resources.context import ResourceContext
from stratus_blueprints.core.resources.types import Network, SubnetTier
from stratus_blueprints.providers.network.spec import IpFamily, NetworkSpec
from stratus_blueprints.providers.network.vpc import (
    DirectVpcProvider,
    NetworkState,
    VpcProvider,
)


CREATE_OPS = ("create_network", "create_cidr_block", "create_subnet", "associate_subnet_ipv6", "tag")


def _ctx(backend, zones=("us-west-2a", "us-west-2b", "us-west-2c")):
    return ResourceContext(
        build_id="b-net",
        backend=backend,
        zones=list(zones),
        meta={"blueprint_id": "blueprint-construct-dev"},
    )


def _creation_calls(backend):
    return [c for c in backend.calls if c["op"] in CREATE_OPS]


# -----------------------------
# Legado
# -----------------------------

def test_legacy_two_zones_creates_public_and_private_per_zone():
    """
    Faixa primária 10.0.0.0/16, sem faixa secundária, 2 zonas: Ready com
    2 públicas + 2 privadas, sem estado de particionamento secundário.
    """
    backend = InMemoryBackend()
    ctx = _ctx(backend, zones=("us-west-2a", "us-west-2b"))
    provider = VpcProvider(NetworkSpec(primary_cidr="10.0.0.0/16"))
    ctx.register("vpc", provider)

    network = ctx.resolve("vpc")

    assert isinstance(network, Network)
    assert network.network_id == "vpc-0002"
    assert network.cidr == "10.0.0.0/16"
    assert [s.subnet_id for s in network.public_subnets] == ["subnet-0007", "subnet-0008"]
    assert [s.subnet_id for s in network.private_subnets] == ["subnet-0009", "subnet-0010"]
    assert [s.zone for s in network.public_subnets] == ["us-west-2a", "us-west-2b"]
    assert [s.tier for s in network.private_subnets] == [SubnetTier.PRIVATE, SubnetTier.PRIVATE]
    assert network.secondary_subnets == {}

    assert provider.state == NetworkState.READY
    assert provider.history == [
        NetworkState.UNINITIALIZED,
        NetworkState.RESOLVING,
        NetworkState.CREATING,
        NetworkState.READY,
    ]
    assert NetworkState.SECONDARY_PARTITIONING not in provider.history


def test_legacy_default_primary_range():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(NetworkSpec()))

    network = ctx.resolve("vpc")

    assert network.cidr == "10.0.0.0/16"
    call = backend.calls[-1]
    assert call["op"] == "create_network"
    assert call["logical_id"] == "blueprint-construct-dev-vpc"
    assert call["dual_stack"] is False


def test_derived_subnet_names_are_registered():
    backend = InMemoryBackend()
    ctx = _ctx(backend, zones=("us-west-2a", "us-west-2b"))
    ctx.register("main-net", VpcProvider(NetworkSpec()))

    network = ctx.resolve("main-net")

    assert ctx.resolve("main-net-public-subnet-0") is network.public_subnets[0]
    assert ctx.resolve("main-net-private-subnet-1") is network.private_subnets[1]
    assert not ctx.has("secondary-cidr-subnet-0")


def test_repeated_resolution_creates_network_once():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(NetworkSpec()))

    assert ctx.resolve("vpc") is ctx.resolve("vpc")
    assert backend.count_calls("create_network") == 1


def test_provide_twice_is_a_programming_error():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    provider = VpcProvider(NetworkSpec())
    provider.provide(ctx)

    with pytest.raises(RuntimeError):
        provider.provide(ctx)


def test_backend_is_required():
    ctx = ResourceContext(build_id="b", zones=["us-west-2a"])
    with pytest.raises(RuntimeError):
        VpcProvider(NetworkSpec()).provide(ctx)


def test_zones_are_required_for_creation():
    ctx = _ctx(InMemoryBackend(), zones=())
    with pytest.raises(ValueError):
        VpcProvider(NetworkSpec()).provide(ctx)


# -----------------------------
# Lookup
# -----------------------------

def test_default_identifier_looks_up_without_creation():
    """
    Identificador "default": Resolving -> LookupOnly, exatamente uma
    chamada de lookup da rede padrão e nenhuma chamada de criação.
    """
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    provider = VpcProvider(NetworkSpec(network_id="default"))
    ctx.register("vpc", provider)

    network = ctx.resolve("vpc")

    assert backend.count_calls("lookup_network") == 1
    assert backend.calls == [{"op": "lookup_network", "identifier": "default"}]
    assert _creation_calls(backend) == []
    assert backend.created == []

    assert network.looked_up is True
    assert network.network_id == "vpc-0001"
    assert len(network.public_subnets) == 3
    assert provider.history == [
        NetworkState.UNINITIALIZED,
        NetworkState.RESOLVING,
        NetworkState.LOOKUP_ONLY,
        NetworkState.READY,
    ]
    assert ctx.has("vpc-private-subnet-2")


def test_lookup_by_id():
    backend = InMemoryBackend()
    imported = backend.seed_network(cidr="192.168.0.0/16", zones=["us-west-2a"])
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(NetworkSpec(network_id=imported.handle.resource_id)))

    network = ctx.resolve("vpc")

    assert network.network_id == imported.handle.resource_id
    assert network.cidr == "192.168.0.0/16"
    assert _creation_calls(backend) == []


def test_lookup_not_found_does_not_fall_back_to_creation():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    provider = VpcProvider(NetworkSpec(network_id="vpc-404"))
    ctx.register("vpc", provider)

    with pytest.raises(LookupNotFoundError) as exc:
        ctx.resolve("vpc")

    assert exc.value.details == {"name": "vpc", "kind": "network", "identifier": "vpc-404"}
    assert _creation_calls(backend) == []
    assert not ctx.is_realized("vpc")
    assert NetworkState.READY not in provider.history


def test_default_lookup_without_default_network_fails():
    backend = InMemoryBackend(seed_default_network=False)
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(NetworkSpec(network_id="default")))

    with pytest.raises(LookupNotFoundError):
        ctx.resolve("vpc")


def test_lookup_only_ignores_secondary_range_with_warning():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(NetworkSpec(
        network_id="default",
        secondary_cidr="100.64.0.0/16",
        secondary_subnet_cidrs=("100.64.0.0/24",),
    )))

    network = ctx.resolve("vpc")

    assert network.secondary_subnets == {}
    assert _creation_calls(backend) == []
    assert ctx.warnings["vpc"] == ["secondary range ignored for looked-up network"]


# -----------------------------
# Faixa secundária
# -----------------------------

def _secondary_spec(*cidrs):
    return NetworkSpec(secondary_cidr="100.64.0.0/16", secondary_subnet_cidrs=tuple(cidrs))


def test_secondary_partitioning_with_skipped_zone():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    provider = VpcProvider(_secondary_spec("100.64.0.0/24", None, "100.64.2.0/24"))
    ctx.register("vpc", provider)

    network = ctx.resolve("vpc")

    assert sorted(network.secondary_subnets) == [0, 2]
    sub0 = network.secondary_subnets[0]
    sub2 = network.secondary_subnets[2]
    assert (sub0.zone, sub0.cidr, sub0.tier) == ("us-west-2a", "100.64.0.0/24", SubnetTier.SECONDARY)
    assert (sub2.zone, sub2.cidr) == ("us-west-2c", "100.64.2.0/24")
    assert backend.count_calls("create_subnet") == 2

    assert provider.history[-2:] == [NetworkState.SECONDARY_PARTITIONING, NetworkState.READY]
    assert ctx.resolve("secondary-cidr-subnet-0") is sub0
    assert ctx.resolve("secondary-cidr-subnet-2") is sub2
    assert not ctx.has("secondary-cidr-subnet-1")


def test_secondary_creation_dependencies():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(_secondary_spec("100.64.0.0/24", "100.64.1.0/24")))

    network = ctx.resolve("vpc")

    block = network.address_blocks[-1]
    assert block.attr("cidr") == "100.64.0.0/16"
    assert block.logical_id == "blueprint-construct-dev-vpc-secondaryCidr"
    assert block.depends_on == (network.network_id,)

    for zone_index, subnet in network.secondary_subnets.items():
        assert subnet.handle.depends_on == (block.resource_id,)
        assert subnet.handle.logical_id == f"blueprint-construct-dev-vpc-private-subnet-{zone_index}"

    ops = [c["op"] for c in backend.calls]
    assert ops.index("create_network") < ops.index("create_cidr_block") < ops.index("create_subnet")
    assert ops.index("create_subnet") < ops.index("tag")


def test_secondary_subnets_are_tagged():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(_secondary_spec("100.64.0.0/24", None, "100.64.2.0/24")))

    network = ctx.resolve("vpc")

    tags = {(c["resource_id"], c["key"], c["value"]) for c in backend.calls if c["op"] == "tag"}
    sub0 = network.secondary_subnets[0].subnet_id
    sub2 = network.secondary_subnets[2].subnet_id
    assert tags == {
        (sub0, "kubernetes.io/role/internal-elb", "1"),
        (sub0, "Name", "blueprint-construct-dev-PrivateSubnet-0"),
        (sub2, "kubernetes.io/role/internal-elb", "1"),
        (sub2, "Name", "blueprint-construct-dev-PrivateSubnet-2"),
    }
    for handle in backend.created:
        if handle.kind.value == "tag":
            assert handle.depends_on == (handle.attr("target"),)


def test_secondary_deployment_plan_is_valid():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(_secondary_spec("100.64.0.0/24", "100.64.1.0/24", "100.64.2.0/24")))
    ctx.resolve("vpc")

    order = plan_creation_order(backend.created, external_ids=backend.external_ids())
    ids = [h.resource_id for h in order]
    for h in order:
        for dep in h.depends_on:
            if dep in ids:
                assert ids.index(dep) < ids.index(h.resource_id)


def test_excess_secondary_ranges_fail_before_any_creation():
    backend = InMemoryBackend()
    ctx = _ctx(backend, zones=("us-west-2a", "us-west-2b"))
    provider = VpcProvider(_secondary_spec("100.64.0.0/24", "100.64.1.0/24", "100.64.2.0/24"))
    ctx.register("vpc", provider)

    with pytest.raises(PartitionRangeExhaustedError):
        ctx.resolve("vpc")

    assert backend.calls == []
    assert backend.created == []
    assert NetworkState.CREATING not in provider.history


def test_overlapping_secondary_ranges_fail_before_any_creation():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(_secondary_spec("100.64.0.0/23", "100.64.1.0/24")))

    with pytest.raises(PartitionRangeExhaustedError):
        ctx.resolve("vpc")
    assert _creation_calls(backend) == []


@pytest.mark.parametrize("primary", [None, "10.0.0.0/16"])
def test_secondary_range_overlapping_primary_fails_before_any_creation(primary):
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    spec = NetworkSpec(
        primary_cidr=primary,
        secondary_cidr="10.0.0.0/16",
        secondary_subnet_cidrs=("10.0.200.0/24",),
    )
    provider = VpcProvider(spec)
    ctx.register("vpc", provider)

    with pytest.raises(PartitionRangeExhaustedError) as exc:
        ctx.resolve("vpc")

    assert exc.value.details["primary_cidr"] == "10.0.0.0/16"
    assert backend.calls == []
    assert NetworkState.CREATING not in provider.history


def test_failed_provide_reraises_same_error_without_backend_calls():
    backend = InMemoryBackend()
    ctx = _ctx(backend, zones=("us-west-2a", "us-west-2b"))
    provider = VpcProvider(_secondary_spec("100.64.0.0/24", "100.64.1.0/24", "100.64.2.0/24"))
    ctx.register("vpc", provider)

    with pytest.raises(PartitionRangeExhaustedError) as first:
        ctx.resolve("vpc")
    with pytest.raises(PartitionRangeExhaustedError) as second:
        ctx.resolve("vpc")

    assert second.value is first.value
    assert provider.state == NetworkState.RESOLVING
    assert backend.calls == []


# -----------------------------
# Dual-stack
# -----------------------------

def test_dual_stack_sequential_ipv6_blocks():
    """
    2 zonas (2 públicas + 2 privadas): bloco 0 -> pública zona 0,
    1 -> pública zona 1, 2 -> privada zona 0, 3 -> privada zona 1.
    """
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    provider = VpcProvider(NetworkSpec(ip_family=IpFamily.IPV6))
    ctx.register("vpc", provider)

    network = ctx.resolve("vpc")

    assert network.zones == ("us-west-2a", "us-west-2b")
    assert [s.ipv6_cidr for s in network.public_subnets] == ["2600:1f13::/64", "2600:1f13:0:1::/64"]
    assert [s.ipv6_cidr for s in network.private_subnets] == ["2600:1f13:0:2::/64", "2600:1f13:0:3::/64"]

    create = next(c for c in backend.calls if c["op"] == "create_network")
    assert create["dual_stack"] is True
    assert create["zones"] == ["us-west-2a", "us-west-2b"]
    assert provider.history == [
        NetworkState.UNINITIALIZED,
        NetworkState.RESOLVING,
        NetworkState.CREATING,
        NetworkState.READY,
    ]


def test_dual_stack_associations_depend_on_ipv6_block():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(NetworkSpec(ip_family=IpFamily.IPV6)))

    network = ctx.resolve("vpc")

    ipv6_block = network.address_blocks[0]
    assert ipv6_block.attr("ipv6") is True
    assert ipv6_block.attr("cidr") == "2600:1f13::/56"
    assert ipv6_block.depends_on == (network.network_id,)

    associations = [h for h in backend.created if h.attr("subnet_id")]
    assert len(associations) == 4
    for assoc in associations:
        assert ipv6_block.resource_id in assoc.depends_on
        assert assoc.attr("assign_on_creation") is True

    ops = [c["op"] for c in backend.calls]
    assert ops.index("create_cidr_block") < ops.index("associate_subnet_ipv6")


def test_dual_stack_respects_max_zones():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(NetworkSpec(ip_family=IpFamily.IPV6, max_zones=3)))

    network = ctx.resolve("vpc")

    assert len(network.subnets) == 6
    assert backend.count_calls("associate_subnet_ipv6") == 6


def test_dual_stack_with_secondary_partitioning():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    provider = VpcProvider(NetworkSpec(
        ip_family=IpFamily.IPV6,
        secondary_cidr="100.64.0.0/16",
        secondary_subnet_cidrs=("100.64.0.0/24", "100.64.1.0/24"),
    ))
    ctx.register("vpc", provider)

    network = ctx.resolve("vpc")

    assert sorted(network.secondary_subnets) == [0, 1]
    assert NetworkState.SECONDARY_PARTITIONING in provider.history
    assert len(network.address_blocks) == 2


def test_network_state_is_logged():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("vpc", VpcProvider(NetworkSpec()))
    ctx.resolve("vpc")

    states = [e["state"] for e in ctx.events if e["message"] == "network state"]
    assert states == ["resolving", "creating", "ready"]


# -----------------------------
# Direct
# -----------------------------

def test_direct_vpc_provider_returns_network_without_calls():
    backend = InMemoryBackend()
    allocation = backend.lookup_network("default")
    backend.calls.clear()
    ctx = _ctx(backend)
    network = Network(handle=allocation.handle, zones=allocation.zones)
    ctx.register("vpc", DirectVpcProvider(network))

    assert ctx.resolve("vpc") is network
    assert backend.calls == []


def test_direct_vpc_provider_rejects_non_network():
    with pytest.raises(TypeError):
        DirectVpcProvider("vpc-0001")
