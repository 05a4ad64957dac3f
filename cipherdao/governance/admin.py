"""
Administrative settings consumed by the governance core.

The core only reads through this object (weight lookup, admin check, global
open flag). Writes go through owner-only setters that share the core's
authorization policy.
"""

from typing import Dict, Iterable, Optional, Sequence

from ..constants import EUINT64_MAX
from ..crypto import is_valid_address, to_checksum_address
from ..logger import get_logger
from .errors import ValidationError
from .policy import Action, AuthorizationPolicy

logger = get_logger(__name__)


def normalize(address: str) -> str:
    """Checksum *address* or raise ValidationError."""
    if not is_valid_address(address):
        raise ValidationError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


class GovernanceSettings:
    """
    Owner, administrators, voter weights and the global voting switch.

    Args:
        owner:          Deploying account; always an administrator
        administrators: Additional administrator accounts
        voting_open:    Initial state of the global voting switch
    """

    def __init__(
        self,
        owner: str,
        administrators: Optional[Iterable[str]] = None,
        voting_open: bool = True,
    ):
        self.owner = normalize(owner)
        self._admins = {self.owner}
        self._admins.update(normalize(a) for a in (administrators or ()))
        self._weights: Dict[str, int] = {}
        self._voting_open = voting_open
        self.policy = AuthorizationPolicy(self.is_admin)

    # ── Reads (consumed by the core) ──────────────────────────────────

    @property
    def voting_open(self) -> bool:
        return self._voting_open

    def is_admin(self, address: str) -> bool:
        try:
            return to_checksum_address(address) in self._admins
        except ValueError:
            return False

    def weight_of(self, address: str) -> int:
        try:
            return self._weights.get(to_checksum_address(address), 0)
        except ValueError:
            return 0

    # ── Owner-only writes ─────────────────────────────────────────────

    @staticmethod
    def _check_weight(weight) -> int:
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
            raise ValidationError(f"Voter weight must be a non-negative integer, got {weight!r}")
        if weight > EUINT64_MAX:
            raise ValidationError(f"Voter weight {weight} exceeds the 64-bit tally range")
        return weight

    def set_voter_weight(self, caller: str, voter: str, weight: int) -> None:
        self.policy.require(Action.SET_VOTER_WEIGHT, caller)
        voter = normalize(voter)
        weight = self._check_weight(weight)
        self._weights[voter] = weight
        logger.info(f"Voter weight: {voter} = {weight}")

    def set_multiple_voter_weights(
        self,
        caller: str,
        voters: Sequence[str],
        weights: Sequence[int],
    ) -> None:
        self.policy.require(Action.SET_VOTER_WEIGHT, caller)
        if len(voters) != len(weights):
            raise ValidationError("Array length mismatch")
        updates = {normalize(v): self._check_weight(w) for v, w in zip(voters, weights)}
        self._weights.update(updates)
        logger.info(f"Voter weights updated for {len(updates)} accounts")

    def set_voting_open(self, caller: str, is_open: bool) -> None:
        self.policy.require(Action.SET_VOTING_OPEN, caller)
        self._voting_open = bool(is_open)
        logger.info(f"Voting system {'OPEN' if is_open else 'CLOSED'} (by {caller})")

    def to_dict(self) -> Dict:
        return {
            "owner": self.owner,
            "administrators": sorted(self._admins),
            "votingOpen": self._voting_open,
            "voterWeights": dict(self._weights),
        }
