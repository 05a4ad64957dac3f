"""
CipherDAO Configuration

Loads cipherdao.toml; environment variables override TOML values.
"""

from .loader import (
    ContractConfig,
    DAOConfig,
    OracleConfig,
    ProtocolConfig,
    load_config,
)

__all__ = [
    "ContractConfig",
    "DAOConfig",
    "OracleConfig",
    "ProtocolConfig",
    "load_config",
]
