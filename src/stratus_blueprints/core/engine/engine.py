# src/stratus_blueprints/core/engine/engine.py
"""
Build de blueprint: registro + resolução + plano de criação.

O build é executado uma única vez por blueprint:
    1. registra os providers declarados, em ordem de declaração
    2. resolve os nomes pedidos (por padrão, todos os declarados)
    3. realiza os sub-recursos derivados registrados durante a resolução
    4. planeja a ordem de criação dos recursos produzidos no backend

Política de erro (fail-fast):
    - A primeira exceção interrompe o build
    - O erro é convertido em ErrorPayload e registrado no event log do
      contexto e no Manifest (quando presente)
    - A exceção original é relançada sem modificação; nenhum recurso
      substituto é sintetizado
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from stratus_blueprints.core.errors import exception_to_error
from stratus_blueprints.core.exceptions import BlueprintException
from stratus_blueprints.core.resources.context import ResourceContext
from stratus_blueprints.core.resources.provider import ResourceProvider
from stratus_blueprints.core.resources.types import Network, ResourceHandle, Subnet
from stratus_blueprints.core.traceability.manifest import (
    BuildManifest,
    add_event,
    resource_failed,
    resource_resolved,
)

from .planner import plan_creation_order


@dataclass(frozen=True)
class BuildResult:
    """Resultado agregado de um build."""

    resources: Dict[str, Any] = field(default_factory=dict)
    deployment: List[ResourceHandle] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def get(self, name: str) -> Any:
        return self.resources[name]


def _describe(value: Any) -> Tuple[Optional[str], Optional[str]]:
    if isinstance(value, Network):
        return "network", value.network_id
    if isinstance(value, Subnet):
        return "subnet", value.subnet_id
    if isinstance(value, ResourceHandle):
        return value.kind.value, value.resource_id
    return type(value).__name__, None


def new_build_context(
    config: Dict[str, Any],
    *,
    backend: Any,
    zones: Optional[Sequence[str]] = None,
    build_id: Optional[str] = None,
) -> ResourceContext:
    """
    Cria o ResourceContext de um build a partir da configuração efetiva.

    `blueprint.id` vira `meta.blueprint_id`; `blueprint.zones` define as zonas
    quando `zones` não é informado.
    """
    # import tardio: providers.network depende do core
    from stratus_blueprints.providers.network.spec import zones_from_config

    blueprint_cfg = (config or {}).get("blueprint", {}) or {}
    resolved_zones = list(zones) if zones is not None else list(zones_from_config(config))
    return ResourceContext(
        build_id=build_id or uuid.uuid4().hex,
        backend=backend,
        config=config or {},
        zones=resolved_zones,
        meta={"blueprint_id": blueprint_cfg.get("id") or "blueprint"},
    )


class BlueprintBuild:
    """Build canônico: registra, resolve e planeja a materialização."""

    def __init__(
        self,
        *,
        ctx: ResourceContext,
        resources: Mapping[str, ResourceProvider],
        resolve: Optional[Sequence[str]] = None,
        manifest: Optional[BuildManifest] = None,
    ):
        self.ctx = ctx
        self.resources: Dict[str, ResourceProvider] = dict(resources)
        self.resolve = list(resolve) if resolve is not None else None
        self.manifest = manifest

    def _targets(self) -> List[str]:
        if self.resolve is not None:
            return list(self.resolve)
        build_cfg = (self.ctx.config or {}).get("build", {}) or {}
        configured = build_cfg.get("resolve")
        if isinstance(configured, list) and configured:
            return [str(n) for n in configured]
        return list(self.resources)

    def _deployment(self) -> List[ResourceHandle]:
        backend = self.ctx.backend
        if backend is None:
            return []
        return plan_creation_order(
            list(getattr(backend, "created", []) or []),
            external_ids=backend.external_ids() if hasattr(backend, "external_ids") else (),
        )

    def _mirror_events(self) -> None:
        if self.manifest is None:
            return
        for ev in self.ctx.events:
            add_event(
                self.manifest,
                event_type="log",
                ts=datetime.fromisoformat(ev["timestamp"]),
                resource=ev.get("resource"),
                payload={k: v for k, v in ev.items() if k not in ("timestamp", "resource")},
            )

    def _pending_derived(self) -> List[str]:
        return [
            n for n in self.ctx.names()
            if n not in self.resources and not self.ctx.is_realized(n)
        ]

    def run(self) -> BuildResult:
        current: Optional[str] = None
        try:
            for name, provider in self.resources.items():
                current = name
                self.ctx.register(name, provider)

            for name in self._targets():
                current = name
                self.ctx.resolve(name)

            # sub-recursos derivados, em quantos níveis houver
            pending = self._pending_derived()
            while pending:
                for name in pending:
                    current = name
                    self.ctx.resolve(name)
                pending = self._pending_derived()
            current = None

            deployment = self._deployment()

        except Exception as e:
            error = exception_to_error(e)
            failed_name = current
            if isinstance(e, BlueprintException) and e.details.get("name"):
                failed_name = e.details["name"]
            self.ctx.log(resource=failed_name, level="error", message=error.message, error=error.to_dict())
            if self.manifest is not None:
                self._mirror_events()
                resource_failed(self.manifest, name=failed_name, ts=datetime.now(timezone.utc), error=error.to_dict())
            raise

        realized = self.ctx.realized()
        if self.manifest is not None:
            self._mirror_events()
            now = datetime.now(timezone.utc)
            for name, value in realized.items():
                kind, resource_id = _describe(value)
                resource_resolved(self.manifest, name=name, ts=now, kind=kind, resource_id=resource_id)

        return BuildResult(resources=realized, deployment=deployment, events=list(self.ctx.events))
