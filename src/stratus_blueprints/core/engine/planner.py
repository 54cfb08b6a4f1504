# src/stratus_blueprints/core/engine/planner.py
"""
Planejador da ordem de criação no backend (DAG).

Este módulo valida o grafo de dependências de criação dos recursos
produzidos por um build e devolve uma ordem topológica determinística,
pronta para ser materializada pelo backend de provisionamento.

As arestas vêm de `ResourceHandle.depends_on`, declaradas pelos providers
no momento da criação:
    - bloco secundário depende da rede primária
    - sub-redes secundárias dependem do bloco secundário
    - associação IPv6 de cada sub-rede depende do bloco IPv6 da rede
    - tags dependem do recurso marcado

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn)
    - Empates são resolvidos por ordem lexicográfica de `resource_id`
    - Dependências para recursos localizados (lookup) são aceitas quando
      declaradas em `external_ids`

Invariantes:
    - Nenhum recurso aparece antes de suas dependências
    - Todos os recursos aparecem exatamente uma vez
    - A mesma entrada sempre produz a mesma ordem

Limites explícitos:
    - Não chama o backend
    - Não interage com o ResourceContext
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from stratus_blueprints.core.resources.types import ResourceHandle


class UnknownDependencyError(ValueError):
    """
    Exceção levantada quando um recurso depende de um id inexistente.

    O id referenciado não foi criado neste build nem foi declarado como
    recurso externo (localizado via lookup).
    """


class CreationCycleError(ValueError):
    """
    Exceção levantada quando as dependências de criação formam um ciclo.

    Nenhuma ordem de materialização válida existe nesta condição.
    """


def plan_creation_order(
    handles: Iterable[ResourceHandle],
    *,
    external_ids: Optional[Iterable[str]] = None,
) -> List[ResourceHandle]:
    """
    Valida e produz uma ordem de criação topológica determinística.

    Dependências para ids em `external_ids` são satisfeitas de antemão
    (recursos que já existem no backend) e não geram arestas.

    Args:
        handles: Recursos criados pelo build.
        external_ids: Ids de recursos pré-existentes que podem ser referenciados.

    Returns:
        List[ResourceHandle]: Recursos em ordem de criação.

    Raises:
        ValueError: Se algum handle possuir `resource_id` inválido ou duplicado.
        UnknownDependencyError: Se houver dependência para id desconhecido.
        CreationCycleError: Se houver ciclo no grafo de criação.
    """
    external: Set[str] = set(external_ids or ())
    by_id: Dict[str, ResourceHandle] = {}
    for h in handles:
        rid = getattr(h, "resource_id", None)
        if not isinstance(rid, str) or not rid.strip():
            raise ValueError("resource_id must be a non-empty string")
        if rid in by_id:
            raise ValueError(f"Duplicate resource id: {rid}")
        by_id[rid] = h

    deps: Dict[str, List[str]] = {}
    for rid, h in by_id.items():
        internal: List[str] = []
        for dep in dict.fromkeys(h.depends_on):
            if dep in by_id:
                internal.append(dep)
            elif dep not in external:
                raise UnknownDependencyError(f"Resource '{rid}' depends on unknown resource '{dep}'")
        deps[rid] = internal

    incoming_count: Dict[str, int] = {rid: len(d) for rid, d in deps.items()}
    outgoing: Dict[str, Set[str]] = {rid: set() for rid in by_id}
    for rid, dlist in deps.items():
        for dep in dlist:
            outgoing[dep].add(rid)

    ready: List[str] = sorted(rid for rid, c in incoming_count.items() if c == 0)
    order_ids: List[str] = []

    while ready:
        rid = ready.pop(0)
        order_ids.append(rid)
        for child in sorted(outgoing[rid]):
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
                ready.sort()

    if len(order_ids) != len(by_id):
        stuck = sorted(rid for rid in by_id if rid not in set(order_ids))
        raise CreationCycleError(f"Cycle detected in creation dependency graph: {stuck}")

    return [by_id[rid] for rid in order_ids]
