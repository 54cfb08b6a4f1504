# src/stratus_blueprints/core/resources/provider.py
"""
Contrato canônico de Resource Provider.

Um provider é uma receita adiada: descreve como produzir um recurso na
primeira vez que ele é demandado pelo nome. O ResourceContext garante que
`provide` seja chamado no máximo uma vez por nome em um build.

Variantes:
    - DirectProvider: embrulha um valor já construído
    - LookupProvider: localiza um recurso existente no backend (somente leitura)
    - providers construtivos: criam recursos novos e podem registrar
      sub-recursos derivados (ver `stratus_blueprints.providers`)

O efeito colateral de registrar sub-recursos é explícito: `provide` devolve
um `Provided`, com o recurso principal e os pares (nome, provider) que o
contexto deve registrar.

Limites explícitos:
    - Providers não controlam memoização (responsabilidade do contexto)
    - Providers não fazem retry de chamadas ao backend
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional, Protocol, Tuple, runtime_checkable

from ..exceptions import lookup_not_found

if TYPE_CHECKING:  # pragma: no cover
    from .context import ResourceContext


# Identificador sentinela: "o recurso padrão da conta/região".
DEFAULT_IDENTIFIER = "default"


@runtime_checkable
class ResourceProvider(Protocol):
    """
    Contrato mínimo de um provider.

    `provide(ctx)` pode devolver o recurso diretamente ou um `Provided`
    quando também precisa registrar sub-recursos derivados.
    """

    def provide(self, ctx: "ResourceContext") -> Any:
        ...


@dataclass(frozen=True)
class Provided:
    """Recurso principal mais os sub-recursos a registrar no contexto."""
    resource: Any
    sub_resources: List[Tuple[str, ResourceProvider]] = field(default_factory=list)


@dataclass(frozen=True)
class DirectProvider:
    """Provider de valor já realizado: sempre devolve o mesmo valor, sem efeitos."""
    value: Any

    def provide(self, ctx: "ResourceContext") -> Any:
        return self.value


class LookupProvider(ABC):
    """
    Base de providers de lookup.

    Subclasses implementam `lookup`, que consulta o backend em modo somente
    leitura e devolve None quando não existe correspondência. A ausência é
    determinística (não transitória) e resulta em LookupNotFoundError.
    """

    kind: str = "resource"

    def __init__(self, identifier: str):
        if not isinstance(identifier, str) or not identifier.strip():
            raise ValueError("lookup identifier must be a non-empty string")
        self.identifier = identifier

    @property
    def is_default(self) -> bool:
        return self.identifier == DEFAULT_IDENTIFIER

    @abstractmethod
    def lookup(self, ctx: "ResourceContext") -> Optional[Any]:
        ...

    def provide(self, ctx: "ResourceContext") -> Any:
        found = self.lookup(ctx)
        if found is None:
            raise lookup_not_found(
                kind=self.kind,
                identifier=self.identifier,
                name=ctx.current_resource(),
            )
        ctx.log(
            resource=ctx.current_resource(),
            level="info",
            message=f"{self.kind} looked up",
            identifier=self.identifier,
        )
        return found

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.identifier!r})"
