# src/stratus_blueprints/core/traceability/__init__.py
"""
Rastreabilidade de builds.

Expõe o Manifest v1 (`BuildManifest`) e as operações explícitas que o
atualizam durante um build. Nenhum evento é registrado implicitamente.
"""

from .manifest import (
    BuildManifest,
    add_event,
    create_manifest,
    load_manifest,
    resource_failed,
    resource_resolved,
    save_manifest,
)

__all__ = [
    "BuildManifest",
    "create_manifest",
    "add_event",
    "resource_resolved",
    "resource_failed",
    "save_manifest",
    "load_manifest",
]
