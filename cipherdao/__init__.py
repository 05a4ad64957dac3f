"""
CipherDAO

Confidential stake-weighted proposal voting: encrypted ballots,
homomorphic tallying, oracle-attested reveal and timeout refunds.
"""

__version__ = "0.1.0"
