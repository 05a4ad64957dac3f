"""
Decryption oracle interface.

The core submits ciphertext handles and returns immediately with a request
id. The result arrives later as an independent call to the registered
callback, or never.
"""

from abc import ABC, abstractmethod
from typing import Sequence


class DecryptionOracle(ABC):

    @abstractmethod
    def request_decryption(
        self,
        handles: Sequence[str],
        callback_id: str,
        requester: str,
    ) -> int:
        """Queue a decryption of *handles* and return a nonzero request id."""
