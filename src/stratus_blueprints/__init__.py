# src/stratus_blueprints/__init__.py
"""
Stratus Blueprints: provisionamento declarativo de blueprints de infraestrutura.

Um blueprint declara recursos nomeados (rede, roles, armazenamento) como
providers resolvidos sob demanda. Um build materializa esses recursos uma
única vez, em ordem compatível com as dependências declaradas.

Arquitetura em alto nível:
    - core.resources    → ResourceContext (registro memoizado) e providers
    - core.engine       → build e ordem de criação
    - core.config       → configuração (defaults + overrides locais)
    - core.traceability → Manifest do build
    - providers         → rede, IAM e armazenamento
    - backend           → contrato do backend de provisionamento

Limites explícitos:
    - Não é um framework genérico de injeção de dependências
    - Não persiste estado entre builds
"""

from .core.engine import BlueprintBuild, BuildResult, new_build_context
from .core.resources import ResourceContext

__version__ = "0.1.0"

__all__ = ["BlueprintBuild", "BuildResult", "ResourceContext", "new_build_context", "__version__"]
