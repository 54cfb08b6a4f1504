"""Providers de IAM role.

- CreateRoleProvider: cria uma role nomeada (ex.: a role dos nós do cluster)
  com políticas gerenciadas e, opcionalmente, uma política inline.
- LookupRoleProvider: localiza uma role existente pelo nome.

Add-ons referenciam a role pelo nome registrado (ex.: "node-role"); a
criação ocorre uma única vez por build, na primeira resolução.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from stratus_blueprints.core.resources.context import ResourceContext
from stratus_blueprints.core.resources.provider import LookupProvider
from stratus_blueprints.core.resources.types import ResourceHandle


def node_ipv6_policy_document() -> Dict[str, Any]:
    """Política inline exigida pelos nós de um cluster dual-stack."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": [
                    "ec2:AssignIpv6Addresses",
                    "ec2:UnassignIpv6Addresses",
                    "ec2:DescribeInstances",
                    "ec2:DescribeTags",
                    "ec2:DescribeNetworkInterfaces",
                    "ec2:DescribeInstanceTypes",
                ],
                "Resource": "*",
            },
            {
                "Effect": "Allow",
                "Action": ["ec2:CreateTags"],
                "Resource": ["arn:aws:ec2:*:*:network-interface/*"],
            },
        ],
    }


@dataclass
class CreateRoleProvider:
    role_name: str
    assumed_by: str
    managed_policies: Tuple[str, ...] = ()
    inline_policy: Optional[Dict[str, Any]] = field(default=None, repr=False)

    def provide(self, ctx: ResourceContext) -> ResourceHandle:
        handle = ctx.backend.create_role(
            f"{ctx.meta.get('blueprint_id', ctx.build_id)}-{self.role_name}",
            self.role_name,
            assumed_by=self.assumed_by,
            managed_policies=self.managed_policies,
            inline_policy=self.inline_policy,
        )
        ctx.log(resource=ctx.current_resource(), level="info", message="role created",
                role_name=self.role_name, policies=len(self.managed_policies))
        return handle


class LookupRoleProvider(LookupProvider):
    kind = "role"

    def lookup(self, ctx: ResourceContext) -> Optional[ResourceHandle]:
        return ctx.backend.lookup_role(self.identifier)
