# src/stratus_blueprints/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Stratus Blueprints.

As exceções aqui definidas representam violações estruturais da
configuração de um build, e não erros de resolução de recursos.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha do backend de provisionamento

Limites explícitos:
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do build.

    Permite captura genérica de erros de configuração, separando falhas
    estruturais de falhas de resolução.
    """


class DefaultsNotFoundError(ConfigError):
    """
    O arquivo de configuração base (defaults) não existe no caminho informado.

    Sem defaults não existe configuração efetiva válida; nada é inferido.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    O conteúdo raiz da configuração não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"network": {"primary_cidr": "10.0.0.0/16"}}
        - override: {"network": "default"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class InvalidNetworkConfigError(ConfigError):
    """
    Seção `network` ou `blueprint` com valores estruturalmente inválidos.

    Exemplos:
        - `ip_family` diferente de `ipv4`/`ipv6`
        - `secondary_subnet_cidrs` sem `secondary_cidr`
        - `zones` vazia ou com nomes repetidos
    """
