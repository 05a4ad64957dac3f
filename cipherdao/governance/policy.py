"""
Authorization policy.

One function decides who may do what. Entry points call ``require`` with
their action, the caller and (where relevant) the proposal, instead of
scattering owner/creator checks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..crypto import to_checksum_address
from .errors import UnauthorizedError
from .proposals import Proposal


class Action(Enum):
    CREATE_PROPOSAL = "create_proposal"
    SUBMIT_VOTE = "submit_vote"
    REQUEST_REVEAL = "request_reveal"
    TRIGGER_TIMEOUT = "trigger_timeout"
    FORCE_REFUND = "force_refund"
    CLAIM_REFUND = "claim_refund"
    EXECUTE = "execute"
    PAUSE_PROPOSAL = "pause_proposal"
    SET_VOTER_WEIGHT = "set_voter_weight"
    SET_VOTING_OPEN = "set_voting_open"


ADMIN_ONLY = frozenset({
    Action.FORCE_REFUND,
    Action.PAUSE_PROPOSAL,
    Action.SET_VOTER_WEIGHT,
    Action.SET_VOTING_OPEN,
})

CREATOR_OR_ADMIN = frozenset({
    Action.REQUEST_REVEAL,
})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


ALLOW = Decision(True)


class AuthorizationPolicy:
    """
    Args:
        is_admin: Callable(address) → bool
    """

    def __init__(self, is_admin: Callable[[str], bool]):
        self._is_admin = is_admin

    def evaluate(
        self,
        action: Action,
        caller: str,
        proposal: Optional[Proposal] = None,
    ) -> Decision:
        if action in ADMIN_ONLY:
            if self._is_admin(caller):
                return ALLOW
            return Decision(False, "Only owner can operate")

        if action in CREATOR_OR_ADMIN:
            if proposal is None:
                raise ValueError(f"{action.value} requires a proposal to authorize against")
            if self._is_admin(caller):
                return ALLOW
            if to_checksum_address(caller) == proposal.creator:
                return ALLOW
            return Decision(False, "Only proposal creator or owner can operate")

        # Everything else is open to any account; phase guards do the rest.
        return ALLOW

    def require(
        self,
        action: Action,
        caller: str,
        proposal: Optional[Proposal] = None,
    ) -> None:
        decision = self.evaluate(action, caller, proposal)
        if not decision.allowed:
            raise UnauthorizedError(f"{decision.reason} ({action.value} by {caller})")
