# src/stratus_blueprints/core/config/loader.py
"""
Leitura da configuração de um blueprint.

A configuração efetiva de um build vem de dois arquivos:
    - defaults do blueprint (obrigatório), ex.: `blueprint.defaults.yaml`
    - overrides do ambiente (opcional), ex.: `blueprint.local.yaml`

O resultado é lido uma única vez, no início do build, e não muda depois
que o orquestrador de rede começa a resolver.

Invariantes:
    - O arquivo de defaults precisa existir
    - A raiz de cada arquivo é um mapeamento (`dict`)
    - Overrides nunca alteram o dict de defaults carregado

Limites explícitos:
    - Não valida as seções `network`/`blueprint` (ver providers.network.spec)
    - Não calcula hash (ver hashing.py)
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


_PARSERS: Dict[str, Callable[[TextIO], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def _read_mapping(path: Path) -> Dict[str, Any]:
    """
    Lê um arquivo de configuração YAML/JSON como dict.

    Arquivo vazio equivale a `{}`.

    Raises:
        UnsupportedConfigFormatError: Extensão fora de `.yaml`, `.yml`, `.json`.
        InvalidConfigRootTypeError: Raiz do documento não é um mapeamento.
    """
    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedConfigFormatError(
            f"Formato de configuração não suportado: '{path.suffix}' ({path.name})"
        )

    with path.open("r", encoding="utf-8") as fh:
        document = parser(fh)

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise InvalidConfigRootTypeError(
            f"{path.name}: a raiz deve ser um mapeamento, encontrado {type(document).__name__}"
        )
    return document


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Produz a configuração efetiva do blueprint.

    Um `local_path` inexistente é ignorado (ambientes sem override local);
    um `defaults_path` inexistente é erro.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se algum arquivo tiver formato não suportado.
        InvalidConfigRootTypeError: Se a raiz de algum arquivo não for um dict.
        ConfigTypeConflictError: Se o override mudar o tipo de uma chave.
    """
    defaults_file = Path(defaults_path)
    if not defaults_file.exists():
        raise DefaultsNotFoundError(f"Defaults do blueprint não encontrados: {defaults_file}")

    config = _read_mapping(defaults_file)

    if local_path is None:
        return config

    local_file = Path(local_path)
    if not local_file.exists():
        return config

    return deep_merge(config, _read_mapping(local_file))
