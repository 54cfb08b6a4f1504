"""
Stratus Blueprints: Canonical Exceptions (v1)

Este módulo define as exceções tipadas do motor de resolução de recursos.

Objetivo:
- Permitir que o ResourceContext, os providers e o particionador de endereços
  levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload (core.errors)
- Evitar ValueError/RuntimeError genéricos nos guardrails do motor

Regras:
- Todas as exceções são fatais para o build (nenhum retry, nenhum fallback).
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- `details` sempre identifica o recurso envolvido e a condição esperada vs. encontrada.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(eq=False)
class BlueprintException(Exception):
    """Base class para exceções internas do motor de blueprints.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Registro / Resolução
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class UnknownResourceError(BlueprintException):
    """`resolve` chamado para um nome que nunca foi registrado."""


@dataclass(eq=False)
class DuplicateNameError(BlueprintException):
    """`register` chamado para um nome que já possui recurso realizado."""


@dataclass(eq=False)
class CyclicResolutionError(BlueprintException):
    """Ciclo de resolução reentrante (A resolve B que resolve A)."""

    @property
    def chain(self) -> List[str]:
        return list(self.details.get("chain", []))


@dataclass(eq=False)
class TypeMismatchError(BlueprintException):
    """Recurso realizado não satisfaz a capacidade esperada pelo chamador."""


# ---------------------------------------------------------------------------
# Backend / Lookup
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class LookupNotFoundError(BlueprintException):
    """Lookup no backend de provisionamento não encontrou recurso correspondente."""


# ---------------------------------------------------------------------------
# Particionamento de endereços
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class PartitionRangeExhaustedError(BlueprintException):
    """Faixas de sub-redes inválidas, sobrepostas ou em número maior que o disponível."""


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def unknown_resource(name: str) -> UnknownResourceError:
    return UnknownResourceError(
        message=f"Unknown resource: {name}",
        details={"name": name},
        hint="Registre um provider para este nome antes de resolvê-lo.",
    )


def duplicate_name(name: str) -> DuplicateNameError:
    return DuplicateNameError(
        message=f"Resource already realized: {name}",
        details={"name": name},
        hint="Escolha outro nome ou remova o registro duplicado do blueprint.",
    )


def cyclic_resolution(chain: List[str]) -> CyclicResolutionError:
    return CyclicResolutionError(
        message="Cyclic resolution: " + " -> ".join(chain),
        details={"name": chain[0] if chain else None, "chain": list(chain)},
        hint="Remova a referência cruzada entre os providers envolvidos.",
    )


def type_mismatch(name: str, *, expected: str, actual: str) -> TypeMismatchError:
    return TypeMismatchError(
        message=f"Resource '{name}' is {actual}, expected {expected}",
        details={"name": name, "expected": expected, "actual": actual},
    )


def lookup_not_found(*, kind: str, identifier: str, name: Optional[str] = None) -> LookupNotFoundError:
    return LookupNotFoundError(
        message=f"No {kind} found for identifier '{identifier}'",
        details={"name": name, "kind": kind, "identifier": identifier},
        hint="Confirme que o recurso existe na conta/região ou remova o identificador para criá-lo.",
    )


def partition_exhausted(reason: str, **details: Any) -> PartitionRangeExhaustedError:
    return PartitionRangeExhaustedError(
        message=f"Invalid address partition: {reason}",
        details={"reason": reason, **details},
        hint="Revise as faixas secundárias declaradas em network.secondary_subnet_cidrs.",
    )
