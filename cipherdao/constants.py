"""
CipherDAO Constants

This module consolidates all protocol constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from decimal import Decimal
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_TO_FILE':                     'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# LIFECYCLE TIMING (seconds)
# ==================================================================================
VOTING_DURATION = 7 * 24 * 60 * 60      # Voting window after creation
REVEAL_PERIOD = 24 * 60 * 60            # Wait after voting closes before execution
DECRYPTION_TIMEOUT = 2 * 24 * 60 * 60   # Oracle silence before refunds open


# ==================================================================================
# STAKE AND WEIGHT LIMITS
# ==================================================================================
MIN_STAKE = Decimal('0.001')
MAX_STAKE = Decimal('100')
MIN_VOTING_POWER = 100  # Weight required to create a proposal


# ==================================================================================
# PROPOSAL METADATA LIMITS
# ==================================================================================
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000


# ==================================================================================
# VOTE ENCODING
# ==================================================================================
VOTE_NO = 0
VOTE_YES = 1

# Encrypted counters are 64-bit unsigned and wrap on overflow
EUINT64_MAX = 2 ** 64 - 1


# ==================================================================================
# DIGEST DOMAINS
# ==================================================================================
INPUT_PROOF_DOMAIN = b"CipherDAO-v1:input-proof"
ATTESTATION_DOMAIN = b"CipherDAO-v1:decryption-attestation"
HANDLE_DOMAIN = b"CipherDAO-v1:handle"

SIGNATURE_LENGTH = 65       # r(32) || s(32) || v(1)
PAYLOAD_WORD_SIZE = 32      # ABI word


# ==================================================================================
# ORACLE DEFAULTS
# ==================================================================================
DEFAULT_CHAIN_ID = 31337
DEFAULT_ATTESTATION_THRESHOLD = 1
DECRYPTION_CALLBACK_ID = "onDecryptionResult"


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in LOGGER_DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
