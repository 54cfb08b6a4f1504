# src/stratus_blueprints/core/config/hashing.py
"""
Identidade da configuração efetiva de um build.

O hash vai para `inputs.config_hash` do manifest: dois builds com o mesmo
hash partiram da mesma configuração, independente da ordem das chaves nos
arquivos de origem.

Formato: SHA-256 (hex) do JSON canônico em UTF-8, com chaves ordenadas e
separadores compactos.
"""

import hashlib
import json
from typing import Any, Dict


def canonical_config_bytes(config: Dict[str, Any]) -> bytes:
    """Serialização canônica usada como entrada do hash."""
    return json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Devolve o SHA-256 (64 caracteres hex) da configuração.

    Raises:
        TypeError: Se `config` não for um dict.
    """
    if not isinstance(config, dict):
        raise TypeError(f"config_hash exige um dict, recebido {type(config).__name__}")
    return hashlib.sha256(canonical_config_bytes(config)).hexdigest()
