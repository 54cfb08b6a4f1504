# src/stratus_blueprints/core/config/merge.py
"""
Deep-merge de defaults + overrides do blueprint.

Regras por valor do override:
    - mapeamento sobre mapeamento: merge chave a chave
    - lista: substitui a lista inteira (zonas, faixas por zona)
    - `null`: desliga o valor do defaults (ex.: `secondary_cidr: null`)
    - escalar: substitui, desde que o tipo seja o mesmo do defaults

Qualquer outra combinação é conflito estrutural.

Invariantes:
    - Função pura: entradas nunca são mutadas
    - Mesma entrada, mesma saída
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _merge_value(path: str, current: Any, incoming: Any) -> Any:
    if isinstance(current, dict) and isinstance(incoming, dict):
        return deep_merge(current, incoming, _prefix=path)

    # faixas por zona são alinhadas por índice; mescla parcial trocaria a zona de cada faixa
    if isinstance(incoming, list) or current is None or incoming is None:
        return deepcopy(incoming)

    if type(current) is not type(incoming):
        raise ConfigTypeConflictError(
            f"Conflito de tipo em '{path}': defaults={type(current).__name__}, "
            f"override={type(incoming).__name__}"
        )
    return deepcopy(incoming)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any], *, _prefix: str = "") -> Dict[str, Any]:
    """
    Aplica `override` sobre `base` e devolve um novo dict.

    Raises:
        ConfigTypeConflictError: Se alguma chave mudar de tipo, ou se a raiz
            de `base`/`override` não for um dict.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge exige mapeamentos, recebido {type(base).__name__} e {type(override).__name__}"
        )

    merged: Dict[str, Any] = deepcopy(base)
    for key, incoming in override.items():
        path = f"{_prefix}.{key}" if _prefix else str(key)
        if key in merged:
            merged[key] = _merge_value(path, merged[key], incoming)
        else:
            merged[key] = deepcopy(incoming)
    return merged
