"""
Providers concretos do Stratus Blueprints.

Cada subpacote agrupa providers de uma categoria de recurso:
    - network → rede, sub-redes e particionamento de endereços
    - iam     → roles
    - storage → buckets

Providers interagem exclusivamente via ResourceContext e backend.
"""
