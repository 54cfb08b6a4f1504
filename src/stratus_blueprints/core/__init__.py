# src/stratus_blueprints/core/__init__.py
"""
Core do Stratus Blueprints.

Reúne o motor de resolução de recursos, independente de qualquer provider
concreto:
    - resources     → registro memoizado e contratos de provider
    - engine        → build e planejamento da ordem de criação
    - config        → carregamento, merge e hashing de configuração
    - traceability  → Manifest do build
    - errors / exceptions → taxonomia de erros do motor

O core é projetado para ser determinístico e testável de forma isolada,
sem dependência de um backend de nuvem real.
"""
