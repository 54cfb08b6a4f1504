"""Especificação declarativa de rede (NetworkSpec v1).

Config esperada (exemplo):
network:
  id: null                  # "default" ou "vpc-..." => lookup em vez de criação
  primary_cidr: 10.0.0.0/16
  secondary_cidr: 100.64.0.0/16
  secondary_subnet_cidrs:
    - 100.64.0.0/24
    - null                  # zona 1 sem sub-rede secundária
    - 100.64.2.0/24
  ip_family: ipv4           # ipv4 (legado) | ipv6 (dual-stack)
  max_zones: 2              # apenas dual-stack
  nat_gateways: 1           # apenas dual-stack

Regras v1:
- `secondary_subnet_cidrs` exige `secondary_cidr`.
- `id: ipv6` não é identificador de lookup: é tratado como marcador de
  família de endereços (compatível com blueprints antigos).
- A spec é criada uma vez por build e nunca é mutada.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from stratus_blueprints.core.config.errors import InvalidNetworkConfigError


class IpFamily(str, Enum):
    IPV4 = "ipv4"
    IPV6 = "ipv6"


DEFAULT_DUAL_STACK_MAX_ZONES = 2
DEFAULT_DUAL_STACK_NAT_GATEWAYS = 1


@dataclass(frozen=True)
class NetworkSpec:
    network_id: Optional[str] = None
    primary_cidr: Optional[str] = None
    secondary_cidr: Optional[str] = None
    secondary_subnet_cidrs: Tuple[Optional[str], ...] = ()
    ip_family: IpFamily = IpFamily.IPV4
    max_zones: int = DEFAULT_DUAL_STACK_MAX_ZONES
    nat_gateways: int = DEFAULT_DUAL_STACK_NAT_GATEWAYS

    @property
    def is_lookup(self) -> bool:
        return bool(self.network_id) and self.network_id != IpFamily.IPV6.value

    @property
    def is_dual_stack(self) -> bool:
        return self.ip_family == IpFamily.IPV6

    @property
    def wants_secondary(self) -> bool:
        return bool(self.secondary_cidr)


def _get_section(cfg: Dict[str, Any], key: str) -> Dict[str, Any]:
    if not isinstance(cfg, dict):
        return {}
    section = cfg.get(key) or {}
    return section if isinstance(section, dict) else {}


def _optional_str(section: Dict[str, Any], key: str) -> Optional[str]:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise InvalidNetworkConfigError(f"network.{key} must be a non-empty string or null")
    return value.strip()


def _positive_int(section: Dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidNetworkConfigError(f"network.{key} must be a positive integer")
    return value


def network_spec_from_config(cfg: Dict[str, Any]) -> NetworkSpec:
    """Valida a seção `network` da configuração efetiva e produz a NetworkSpec."""
    section = _get_section(cfg, "network")

    raw_family = section.get("ip_family") or IpFamily.IPV4.value
    try:
        ip_family = IpFamily(str(raw_family).lower())
    except ValueError as e:
        raise InvalidNetworkConfigError("network.ip_family must be 'ipv4' or 'ipv6'") from e

    secondary_cidr = _optional_str(section, "secondary_cidr")

    raw_subnets = section.get("secondary_subnet_cidrs")
    if raw_subnets is None:
        subnets: Tuple[Optional[str], ...] = ()
    elif isinstance(raw_subnets, list):
        for c in raw_subnets:
            if c is not None and not isinstance(c, str):
                raise InvalidNetworkConfigError("network.secondary_subnet_cidrs must contain strings or null")
        subnets = tuple(c.strip() if isinstance(c, str) and c.strip() else None for c in raw_subnets)
    else:
        raise InvalidNetworkConfigError("network.secondary_subnet_cidrs must be a list")

    if any(subnets) and not secondary_cidr:
        raise InvalidNetworkConfigError("network.secondary_subnet_cidrs requires network.secondary_cidr")

    return NetworkSpec(
        network_id=_optional_str(section, "id"),
        primary_cidr=_optional_str(section, "primary_cidr"),
        secondary_cidr=secondary_cidr,
        secondary_subnet_cidrs=subnets,
        ip_family=ip_family,
        max_zones=_positive_int(section, "max_zones", DEFAULT_DUAL_STACK_MAX_ZONES),
        nat_gateways=_positive_int(section, "nat_gateways", DEFAULT_DUAL_STACK_NAT_GATEWAYS),
    )


def zones_from_config(cfg: Dict[str, Any]) -> Tuple[str, ...]:
    """Zonas de disponibilidade declaradas em `blueprint.zones`, em ordem estável."""
    section = _get_section(cfg, "blueprint")
    zones = section.get("zones")
    if not isinstance(zones, list) or not zones:
        raise InvalidNetworkConfigError("blueprint.zones must be a non-empty list")
    for z in zones:
        if not isinstance(z, str) or not z.strip():
            raise InvalidNetworkConfigError("blueprint.zones must contain only non-empty strings")
    if len(set(zones)) != len(zones):
        raise InvalidNetworkConfigError("blueprint.zones must not repeat zones")
    return tuple(zones)
