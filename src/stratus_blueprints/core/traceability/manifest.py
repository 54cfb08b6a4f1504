# src/stratus_blueprints/core/traceability/manifest.py
"""
Manifest v1: rastreabilidade de um build de blueprint.

Um Manifest descreve um build depois que ele termina (ou falha):
    - quem rodou: build_id, blueprint_id, versão, início
    - com qual configuração: config_hash
    - o que cada nome virou: status, tipo e id no backend
    - o que aconteceu, em ordem: Event Log espelhado do ResourceContext

Regras:
    - Só as funções deste módulo alteram o Manifest; nada é implícito
    - Timestamps são gravados em UTC, ISO 8601
    - `save_manifest`/`load_manifest` usam JSON com chaves ordenadas

Limites explícitos:
    - O Manifest é artefato de saída de um build; nunca é relido para
      pular resoluções em builds futuros
    - Não decide políticas de resolução
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é tratado como UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


@dataclass
class BuildManifest:
    """
    Estrutura canônica do Manifest de um build.

    Campos:
        - build: metadados (build_id, blueprint_id, started_at, version)
        - inputs: hashes de entrada (config_hash)
        - resources: estado por nome de recurso
        - events: Event Log ordenado
    """
    build: Dict[str, Any]
    inputs: Dict[str, Any]
    resources: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "build": dict(self.build),
            "inputs": dict(self.inputs),
            "resources": {k: dict(v) for k, v in self.resources.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildManifest":
        return cls(
            build=dict(data.get("build", {})),
            inputs=dict(data.get("inputs", {})),
            resources={k: dict(v) for k, v in (data.get("resources", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    build_id: str,
    started_at: datetime,
    version: str,
    config_hash: str,
    blueprint_id: Optional[str] = None,
) -> BuildManifest:
    """Cria o Manifest inicial de um build, sem recursos e sem eventos."""
    return BuildManifest(
        build={
            "build_id": build_id,
            "blueprint_id": blueprint_id,
            "started_at": _iso(started_at),
            "version": version,
        },
        inputs={"config_hash": config_hash},
        resources={},
        events=[],
    )


def add_event(
    manifest: BuildManifest,
    *,
    event_type: str,
    ts: datetime,
    resource: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if resource is not None:
        ev["resource"] = resource
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def resource_resolved(
    manifest: BuildManifest,
    *,
    name: str,
    ts: datetime,
    kind: Optional[str] = None,
    resource_id: Optional[str] = None,
) -> None:
    manifest.resources[name] = {
        "name": name,
        "status": "realized",
        "kind": kind,
        "resource_id": resource_id,
        "realized_at": _iso(ts),
    }
    add_event(manifest, event_type="resource_realized", ts=ts, resource=name,
              payload={"kind": kind, "resource_id": resource_id})


def resource_failed(
    manifest: BuildManifest,
    *,
    name: Optional[str],
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    key = name or "<build>"
    manifest.resources[key] = {
        "name": name,
        "status": "failed",
        "failed_at": _iso(ts),
        "error": error,
    }
    add_event(manifest, event_type="resource_failed", ts=ts, resource=name, payload={"error": error})


def save_manifest(manifest: BuildManifest, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True, default=str),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> BuildManifest:
    data = json.loads(path.read_text(encoding="utf-8"))
    return BuildManifest.from_dict(data)
