"""Providers de rede: especificação, particionamento de endereços e orquestração."""

from .partition import (
    DEFAULT_PRIMARY_CIDR,
    IPV6_BLOCK_PREFIX,
    BlockAssignment,
    SecondarySubnetPlan,
    assign_ipv6_blocks,
    blocks_overlap,
    dual_stack_subnet_order,
    legacy_primary_range,
    plan_secondary_subnets,
)
from .spec import IpFamily, NetworkSpec, network_spec_from_config, zones_from_config
from .subnet import DirectSubnetProvider, LookupSubnetProvider
from .vpc import (
    DirectVpcProvider,
    NetworkState,
    VpcProvider,
    private_subnet_name,
    public_subnet_name,
    secondary_subnet_name,
)

__all__ = [
    "DEFAULT_PRIMARY_CIDR",
    "IPV6_BLOCK_PREFIX",
    "BlockAssignment",
    "SecondarySubnetPlan",
    "assign_ipv6_blocks",
    "blocks_overlap",
    "dual_stack_subnet_order",
    "legacy_primary_range",
    "plan_secondary_subnets",
    "IpFamily",
    "NetworkSpec",
    "network_spec_from_config",
    "zones_from_config",
    "LookupSubnetProvider",
    "DirectSubnetProvider",
    "DirectVpcProvider",
    "NetworkState",
    "VpcProvider",
    "public_subnet_name",
    "private_subnet_name",
    "secondary_subnet_name",
]
