"""Providers de bucket de armazenamento.

- CreateBucketProvider: cria um bucket; o nome físico padrão deriva do
  blueprint e do id lógico (`<blueprint>-<bucket_id>`).
- LookupBucketProvider: localiza um bucket existente pelo nome.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from stratus_blueprints.core.resources.context import ResourceContext
from stratus_blueprints.core.resources.provider import LookupProvider
from stratus_blueprints.core.resources.types import ResourceHandle


REMOVAL_POLICIES = ("retain", "destroy")


@dataclass
class CreateBucketProvider:
    bucket_id: str
    bucket_name: Optional[str] = None
    removal_policy: str = "retain"

    def __post_init__(self) -> None:
        if self.removal_policy not in REMOVAL_POLICIES:
            raise ValueError(f"removal_policy must be one of {REMOVAL_POLICIES}")

    def provide(self, ctx: ResourceContext) -> ResourceHandle:
        blueprint_id = ctx.meta.get("blueprint_id", ctx.build_id)
        name = self.bucket_name or f"{blueprint_id}-{self.bucket_id}".lower()
        return ctx.backend.create_bucket(
            f"{blueprint_id}-{self.bucket_id}",
            name,
            removal_policy=self.removal_policy,
        )


class LookupBucketProvider(LookupProvider):
    kind = "bucket"

    def lookup(self, ctx: ResourceContext) -> Optional[ResourceHandle]:
        return ctx.backend.lookup_bucket(self.identifier)
