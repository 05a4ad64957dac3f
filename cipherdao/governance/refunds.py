"""
Timeout & Refund Manager

The degraded path. If the oracle stays silent for longer than the decryption
timeout, anyone may switch a proposal into refund mode; an administrator may
do so at any time. Voters then reclaim their own stake, once.

Claims set the ``claimed`` flag before any funds move. A transfer that
reports failure leaves the flag set: the claim is spent and the failure is
logged and emitted as an event for off-line reconciliation.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from ..config import ProtocolConfig
from ..logger import get_logger
from .admin import GovernanceSettings
from .errors import (
    AlreadyClaimedError,
    AlreadyResolvedError,
    GovernanceError,
    NoPendingRequestError,
    NoVoteRecordError,
    RefundsAlreadyEnabledError,
    RefundsDisabledError,
    TimeoutNotReachedError,
)
from .ledger import FundsLedger
from .policy import Action
from .proposals import Proposal, ProposalPhase, VoteRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class RefundReceipt:
    proposal_id: int
    voter: str
    amount: Decimal
    paid: bool


class TimeoutRefundManager:
    """
    Sole writer of ``refund_enabled`` and of claim flags.
    """

    def __init__(self, settings: GovernanceSettings, ledger: FundsLedger, config: ProtocolConfig):
        self.settings = settings
        self.ledger = ledger
        self.config = config
        self._refunded: Dict[int, Decimal] = {}

    def refunded(self, proposal_id: int) -> Decimal:
        return self._refunded.get(proposal_id, Decimal("0"))

    def timeout_at(self, proposal: Proposal) -> Optional[int]:
        """First second at which ``trigger_timeout`` is accepted."""
        if proposal.decryption_request_time is None:
            return None
        return proposal.decryption_request_time + self.config.decryption_timeout + 1

    @staticmethod
    def _require_unsettled(proposal: Proposal) -> None:
        if proposal.resolved:
            raise AlreadyResolvedError(f"Proposal #{proposal.id} already resolved")
        if proposal.refund_enabled:
            raise RefundsAlreadyEnabledError(f"Proposal #{proposal.id} refunds already enabled")

    def _enable(self, proposal: Proposal, reason: str, now: int) -> None:
        proposal.refund_enabled = True
        proposal.refund_enabled_at = now
        proposal.record_transition(ProposalPhase.REFUND_ENABLED, reason, now)

    def trigger_timeout(self, proposal: Proposal, caller: str, now: int) -> None:
        """Open refunds once the oracle has been silent past the timeout."""
        self._require_unsettled(proposal)
        if proposal.decryption_request_id == 0:
            raise NoPendingRequestError(f"Proposal #{proposal.id} has no decryption request")
        opens_at = self.timeout_at(proposal)
        if now < opens_at:
            raise TimeoutNotReachedError(
                f"Decryption timeout for proposal #{proposal.id} not reached ({now} < {opens_at})"
            )
        self._enable(proposal, f"oracle timeout, triggered by {caller}", now)

    def admin_force_refund(self, proposal: Proposal, caller: str, now: int) -> None:
        """Emergency override: open refunds regardless of the timeout."""
        self.settings.policy.require(Action.FORCE_REFUND, caller, proposal)
        self._require_unsettled(proposal)
        logger.warning(f"Proposal #{proposal.id}: refunds FORCED by administrator {caller}")
        self._enable(proposal, f"forced by {caller}", now)

    def claim_refund(
        self,
        proposal: Proposal,
        record: Optional[VoteRecord],
        caller: str,
        now: int,
    ) -> RefundReceipt:
        if record is None or not record.voted:
            raise NoVoteRecordError(f"{caller} has no vote on proposal #{proposal.id}")
        if not proposal.refund_enabled:
            raise RefundsDisabledError(f"Refunds not enabled for proposal #{proposal.id}")
        if record.claimed:
            raise AlreadyClaimedError(f"{caller} already claimed on proposal #{proposal.id}")

        refunded = self.refunded(proposal.id) + record.stake
        if refunded > proposal.total_staked:
            raise GovernanceError(
                f"Refund of {record.stake} would exceed total staked {proposal.total_staked} "
                f"on proposal #{proposal.id}"
            )

        record.claimed = True
        record.claimed_at = now
        self._refunded[proposal.id] = refunded

        paid = self.ledger.transfer(record.voter, record.stake)
        if paid:
            logger.info(f"Proposal #{proposal.id}: refunded {record.stake} to {record.voter}")
        else:
            logger.error(
                f"Proposal #{proposal.id}: refund transfer of {record.stake} to {record.voter} "
                f"FAILED; claim is spent"
            )
        return RefundReceipt(
            proposal_id=proposal.id,
            voter=record.voter,
            amount=record.stake,
            paid=paid,
        )
