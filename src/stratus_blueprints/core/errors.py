"""
Stratus Blueprints: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros registrados por um build.
Erros são artefatos de rastreabilidade e fazem parte do contrato operacional
do motor, devendo ser:

- explícitos
- serializáveis
- acionáveis

O motor nunca sintetiza um recurso substituto: o payload é registrado e a
exceção original continua propagando até o chamador do build.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import (
    BlueprintException,
    CyclicResolutionError,
    DuplicateNameError,
    LookupNotFoundError,
    PartitionRangeExhaustedError,
    TypeMismatchError,
    UnknownResourceError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro de um build.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - fatal: erros do motor abortam o build; mantido explícito no payload
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    fatal: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Registro / Resolução
RESOURCE_UNKNOWN = "RESOURCE_UNKNOWN"
RESOURCE_DUPLICATE_NAME = "RESOURCE_DUPLICATE_NAME"
RESOURCE_CYCLIC_RESOLUTION = "RESOURCE_CYCLIC_RESOLUTION"
RESOURCE_TYPE_MISMATCH = "RESOURCE_TYPE_MISMATCH"

# Backend
BACKEND_LOOKUP_NOT_FOUND = "BACKEND_LOOKUP_NOT_FOUND"

# Particionamento
PARTITION_RANGE_EXHAUSTED = "PARTITION_RANGE_EXHAUSTED"

# Build
BUILD_EXECUTION_ERROR = "BUILD_EXECUTION_ERROR"


_CODES = (
    (UnknownResourceError, RESOURCE_UNKNOWN),
    (DuplicateNameError, RESOURCE_DUPLICATE_NAME),
    (CyclicResolutionError, RESOURCE_CYCLIC_RESOLUTION),
    (TypeMismatchError, RESOURCE_TYPE_MISMATCH),
    (LookupNotFoundError, BACKEND_LOOKUP_NOT_FOUND),
    (PartitionRangeExhaustedError, PARTITION_RANGE_EXHAUSTED),
)


def error_code_for(exc: BaseException) -> str:
    for exc_type, code in _CODES:
        if isinstance(exc, exc_type):
            return code
    return BUILD_EXECUTION_ERROR


def exception_to_error(exc: BaseException) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - BlueprintException: já vem com message/details/hint; o código vem do catálogo.
    - Outras exceções: encapsular como BUILD_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, BlueprintException):
        return ErrorPayload(
            type=error_code_for(exc),
            message=exc.message or "Erro de build",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return ErrorPayload(
        type=BUILD_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante o build",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o event log do build e a configuração do blueprint",
    )
