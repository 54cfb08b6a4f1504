# src/stratus_blueprints/core/config/__init__.py

"""
Camada de configuração do Stratus Blueprints.

Este pacote carrega, mescla e identifica a configuração de um build de
blueprint (zonas, rede, recursos a resolver).

A configuração é:
    - declarativa
    - determinística
    - fornecida uma única vez, no início do build

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Geração de hash canônico para o manifest do build

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro

Limites explícitos:
    - Não valida semântica de rede (ver providers.network.spec)
    - Não interage com o ResourceContext
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidNetworkConfigError,
    UnsupportedConfigFormatError,
)
from .hashing import canonical_config_bytes, compute_config_hash
from .loader import load_config
from .merge import deep_merge

__all__ = [
    "load_config",
    "deep_merge",
    "compute_config_hash",
    "canonical_config_bytes",
    "ConfigError",
    "DefaultsNotFoundError",
    "UnsupportedConfigFormatError",
    "InvalidConfigRootTypeError",
    "ConfigTypeConflictError",
    "InvalidNetworkConfigError",
]
