# src/stratus_blueprints/core/engine/__init__.py
"""
Engine do Stratus Blueprints.

Componentes principais:
    - planner → ordem de criação topológica determinística no backend
    - engine  → build: registro, resolução e plano de materialização

Invariantes:
    - Cada nome é resolvido no máximo uma vez por build
    - Nenhum recurso é criado antes de suas dependências declaradas

Limites explícitos:
    - Não define providers de domínio
    - Não persiste estado entre builds
"""

from .engine import BlueprintBuild, BuildResult, new_build_context
from .planner import CreationCycleError, UnknownDependencyError, plan_creation_order

__all__ = [
    "BlueprintBuild",
    "BuildResult",
    "new_build_context",
    "plan_creation_order",
    "UnknownDependencyError",
    "CreationCycleError",
]
