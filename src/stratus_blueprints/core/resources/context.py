# src/stratus_blueprints/core/resources/context.py
"""
Contexto de resolução de recursos de um build.

Este módulo define o `ResourceContext`, o registro memoizado que associa
nomes de recursos a providers (ainda não realizados) ou a recursos já
realizados. Cada build possui sua própria instância; não existe tabela
global de recursos.

O ResourceContext é o único meio permitido de:
    - registrar providers por nome
    - resolver recursos por nome (com memoização)
    - permitir referências cruzadas entre providers durante a resolução
    - registrar logs estruturados e warnings do build

Princípios fundamentais:
    - Um nome realizado devolve sempre o mesmo valor (idempotência)
    - `provide` é chamado no máximo uma vez por nome
    - Referências cruzadas são permitidas; ciclos falham imediatamente
    - Erros propagam sem substituição silenciosa

Invariantes:
    - Um nome realizado nunca volta a ser provider
    - A pilha de nomes em resolução reflete exatamente as chamadas em curso
    - Logs sempre incluem `build_id` e `resource`

Limites explícitos:
    - Não planeja a ordem de criação no backend (ver core.engine.planner)
    - Não executa resoluções concorrentes
    - Não persiste estado entre builds
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from ..exceptions import cyclic_resolution, duplicate_name, type_mismatch, unknown_resource
from .provider import DirectProvider, Provided, ResourceProvider


ExpectedType = Union[Type[Any], Tuple[Type[Any], ...]]


def _type_label(expected: ExpectedType) -> str:
    if isinstance(expected, tuple):
        return " | ".join(getattr(t, "__name__", repr(t)) for t in expected)
    return getattr(expected, "__name__", repr(expected))


@dataclass
class ResourceContext:
    """
    Registro memoizado e reentrante de recursos nomeados de um build.

    Campos canônicos:
    - build_id: identificador único do build
    - backend: cliente do backend de provisionamento usado pelos providers
    - config: configuração efetiva (defaults + local deep-merge)
    - zones: zonas de disponibilidade do blueprint, em ordem estável
    - meta: metadados livres do build (ex.: blueprint_id)
    - events: log estruturado de eventos
    - warnings: warnings por nome de recurso
    """

    build_id: str
    backend: Any = None
    config: Dict[str, Any] = field(default_factory=dict)
    zones: List[str] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    _providers: Dict[str, ResourceProvider] = field(default_factory=dict, init=False, repr=False)
    _realized: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)
    _resolving: List[str] = field(default_factory=list, init=False, repr=False)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Registro
    # -----------------------------
    def register(self, name: str, provider: ResourceProvider) -> None:
        """
        Registra um provider sob `name`.

        Re-registrar um provider ainda não realizado sobrescreve o anterior
        (última escrita vence); o chamador é responsável por essa escolha e
        um warning é registrado para o nome.

        Raises:
            ValueError: Se `name` não for uma string não vazia.
            TypeError: Se `provider` não implementar `provide(ctx)`.
            DuplicateNameError: Se `name` já possuir recurso realizado.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("resource name must be a non-empty string")
        if not isinstance(provider, ResourceProvider):
            raise TypeError(f"provider for '{name}' must implement provide(ctx)")

        if name in self._realized:
            raise duplicate_name(name)

        if name in self._providers:
            self.add_warning(resource=name, message="provider overwritten before resolution")
        else:
            self._order.append(name)

        self._providers[name] = provider
        self.log(resource=name, level="debug", message="provider registered", provider=type(provider).__name__)

    def add_realized(self, name: str, value: Any) -> Any:
        """Registra um valor já construído e o realiza imediatamente."""
        self.register(name, DirectProvider(value))
        return self.resolve(name)

    # -----------------------------
    # Resolução
    # -----------------------------
    def resolve(self, name: str) -> Any:
        """
        Resolve `name` para o recurso realizado.

        Raises:
            UnknownResourceError: Se `name` não estiver registrado.
            CyclicResolutionError: Se `name` já estiver em resolução na pilha atual.
            DuplicateNameError: Se um sub-recurso produzido já estiver realizado;
                nesse caso `name` também não é realizado.
        """
        if name in self._realized:
            return self._realized[name]

        if name in self._resolving:
            start = self._resolving.index(name)
            raise cyclic_resolution(self._resolving[start:] + [name])

        if name not in self._providers:
            raise unknown_resource(name)

        provider = self._providers[name]
        self._resolving.append(name)
        self.log(resource=name, level="debug", message="resolving", depth=len(self._resolving))
        try:
            produced = provider.provide(self)
        finally:
            self._resolving.pop()

        if isinstance(produced, Provided):
            resource = produced.resource
            subs = list(produced.sub_resources)
        else:
            resource = produced
            subs = []

        # sub-recursos inválidos não podem deixar o pai realizado pela metade
        for sub_name, _ in subs:
            if sub_name == name or sub_name in self._realized:
                raise duplicate_name(sub_name)

        self._realized[name] = resource
        self.log(resource=name, level="info", message="resource realized", sub_resources=len(subs))

        for sub_name, sub_provider in subs:
            self.register(sub_name, sub_provider)

        return resource

    def resolve_typed(self, name: str, expected: ExpectedType) -> Any:
        """
        Resolve `name` e verifica que o recurso satisfaz `expected`.

        `expected` pode ser uma classe, uma tupla de classes ou um Protocol
        `@runtime_checkable`.

        Raises:
            TypeMismatchError: Se o recurso realizado não satisfizer `expected`.
        """
        value = self.resolve(name)
        if not isinstance(value, expected):
            raise type_mismatch(
                name,
                expected=_type_label(expected),
                actual=type(value).__name__,
            )
        return value

    # -----------------------------
    # Inspeção
    # -----------------------------
    def has(self, name: str) -> bool:
        return name in self._providers

    def is_realized(self, name: str) -> bool:
        return name in self._realized

    def names(self) -> List[str]:
        """Nomes registrados, em ordem de registro."""
        return list(self._order)

    def realized(self) -> Dict[str, Any]:
        """Recursos realizados, em ordem de realização."""
        return dict(self._realized)

    def current_resource(self) -> Optional[str]:
        return self._resolving[-1] if self._resolving else None

    def resolution_chain(self) -> List[str]:
        return list(self._resolving)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, resource: Optional[str], level: str, message: str, **extra: Any) -> None:
        event = {
            "build_id": self.build_id,
            "resource": resource,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, resource: str, message: str) -> None:
        if resource not in self.warnings:
            self.warnings[resource] = []
        self.warnings[resource].append(message)
