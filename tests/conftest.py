"""
Fixtures compartilhados para testes do Stratus Blueprints.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (YAML)
- backend em memória com a rede padrão já semeada
- contexto de resolução controlado (ResourceContext)
- providers dummy para testes estruturais do registro

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Providers dummy utilizam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa um build real
    - Nenhuma fixture realiza I/O
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração
    - Não validar semântica completa de config
"""

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def blueprint_defaults_yaml() -> str:
    """YAML típico de `config.defaults.yaml` de um blueprint."""
    return """
blueprint:
  id: blueprint-construct-dev
  zones:
    - us-west-2a
    - us-west-2b
    - us-west-2c

network:
  id: null
  primary_cidr: 10.0.0.0/16
  secondary_cidr: null
  secondary_subnet_cidrs: []
  ip_family: ipv4
  max_zones: 2
  nat_gateways: 1

build:
  resolve: []
"""


@pytest.fixture
def blueprint_local_yaml() -> str:
    """Override local: liga a faixa secundária e pula a zona 1."""
    return """
network:
  secondary_cidr: 100.64.0.0/16
  secondary_subnet_cidrs:
    - 100.64.0.0/24
    - null
    - 100.64.2.0/24

build:
  resolve:
    - vpc
"""


# =====================================================
# Backend / contexto
# =====================================================

@pytest.fixture
def zones() -> list:
    return ["us-west-2a", "us-west-2b", "us-west-2c"]


@pytest.fixture
def backend():
    from stratus_blueprints.backend.memory import InMemoryBackend

    return InMemoryBackend()


@pytest.fixture
def build_ctx(backend, zones):
    """ResourceContext pronto para uso, com backend em memória e 3 zonas."""
    from stratus_blueprints.core.resources.context import ResourceContext

    return ResourceContext(
        build_id="build-test",
        backend=backend,
        config={},
        zones=list(zones),
        meta={"blueprint_id": "blueprint-construct-dev"},
    )


# =====================================================
# Providers dummy
# =====================================================

class DummyProvider:
    """
    Provider mínimo que conta quantas vezes `provide` foi chamado.

    `fn`, quando informado, recebe o contexto e produz o valor (permite
    referências cruzadas entre providers nos testes).
    """

    def __init__(self, value=None, fn=None):
        self.value = value
        self.fn = fn
        self.calls = 0

    def provide(self, ctx):
        self.calls += 1
        if self.fn is not None:
            return self.fn(ctx)
        return self.value


@pytest.fixture
def make_provider():
    """Factory de DummyProvider."""
    def _make(value=None, fn=None):
        return DummyProvider(value=value, fn=fn)
    return _make
