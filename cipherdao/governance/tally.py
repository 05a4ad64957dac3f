"""
Encrypted Tally Aggregator

Ingests encrypted, stake-backed votes and folds the voter's weight into the
proposal's encrypted yes/no tallies. The choice is turned into two encrypted
indicators and the weight is routed through ``select``, so a yes vote and a
no vote issue exactly the same sequence of backend operations:

    verify_input → allow → min → as_encrypted → eq → eq → as_encrypted
        → select → select → add → add → allow → allow
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple

from ..config import ProtocolConfig
from ..constants import VOTE_NO, VOTE_YES
from ..fhe import FHEBackend, Handle
from ..logger import get_logger
from .admin import GovernanceSettings
from .errors import (
    AlreadyResolvedError,
    AlreadyVotedError,
    InsufficientVotingPowerError,
    InvalidInputProofError,
    ProposalPausedError,
    RefundsAlreadyEnabledError,
    SystemClosedError,
    ValidationError,
    VotingClosedError,
)
from .ledger import to_amount
from .proposals import Proposal, VoteRecord

logger = get_logger(__name__)


@dataclass
class PendingVote:
    """Validated vote whose tallies are computed but not yet applied."""
    encrypted_yes: Handle
    encrypted_no: Handle
    record: VoteRecord


class EncryptedTallyAggregator:
    """
    Sole writer of a proposal's ciphertext handles and participation counters.

    Args:
        backend:  FHE coprocessor
        contract: address the tallies are permanently allowed to
        settings: weight lookup and global voting switch
        config:   stake bounds
    """

    def __init__(
        self,
        backend: FHEBackend,
        contract: str,
        settings: GovernanceSettings,
        config: ProtocolConfig,
    ):
        self.backend = backend
        self.contract = contract
        self.settings = settings
        self.config = config

    def initialize(self) -> Tuple[Handle, Handle]:
        """Fresh encrypted zero tallies, allowed to the contract."""
        yes = self.backend.as_encrypted(0)
        no = self.backend.as_encrypted(0)
        self.backend.allow(yes, self.contract)
        self.backend.allow(no, self.contract)
        return yes, no

    def _validate(
        self,
        proposal: Proposal,
        voter: str,
        choice: int,
        stake,
        already_voted: bool,
        now: int,
    ) -> Tuple[Decimal, int]:
        if not self.settings.voting_open:
            raise SystemClosedError("Voting system is closed")
        if not proposal.active:
            raise ProposalPausedError(f"Proposal #{proposal.id} not active")
        if proposal.refund_enabled:
            raise RefundsAlreadyEnabledError(f"Proposal #{proposal.id} is in refund mode")
        if proposal.resolved:
            raise AlreadyResolvedError(f"Proposal #{proposal.id} already resolved")
        if not proposal.is_voting_open(now):
            raise VotingClosedError("Voting has ended")
        if already_voted:
            raise AlreadyVotedError("Already voted")

        amount = to_amount(stake)
        if amount < self.config.min_stake or amount > self.config.max_stake:
            raise ValidationError(
                f"Stake {amount} outside [{self.config.min_stake}, {self.config.max_stake}]"
            )
        if isinstance(choice, bool) or choice not in (VOTE_NO, VOTE_YES):
            raise ValidationError(f"Invalid choice: {choice!r}")

        weight = self.settings.weight_of(voter)
        if weight <= 0:
            raise InsufficientVotingPowerError("No voting permission")
        return amount, weight

    def prepare_vote(
        self,
        proposal: Proposal,
        voter: str,
        encrypted_weight: Handle,
        proof: bytes,
        choice: int,
        stake,
        already_voted: bool,
        now: int,
    ) -> PendingVote:
        """
        Validate one vote and compute *proposal*'s next encrypted tallies.

        Nothing on the proposal is written; the caller escrows the stake and
        then hands the result to :meth:`commit`.
        """
        amount, registered_weight = self._validate(
            proposal, voter, choice, stake, already_voted, now
        )

        if not isinstance(encrypted_weight, str) or not isinstance(proof, (bytes, bytearray)):
            raise ValidationError("Encrypted weight must be a handle and proof must be bytes")

        imported = self.backend.verify_input(encrypted_weight, proof, self.contract, voter)
        if not imported.ok:
            logger.warning(
                f"Proposal #{proposal.id}: input proof from {voter} REJECTED ({imported.reason})"
            )
            raise InvalidInputProofError(f"Invalid encrypted weight: {imported.reason}")

        b = self.backend
        weight = b.min(imported.handle, registered_weight)
        encrypted_choice = b.as_encrypted(choice)
        is_yes = b.eq(encrypted_choice, VOTE_YES)
        is_no = b.eq(encrypted_choice, VOTE_NO)
        zero = b.as_encrypted(0)
        yes_increment = b.select(is_yes, weight, zero)
        no_increment = b.select(is_no, weight, zero)
        new_yes = b.add(proposal.encrypted_yes, yes_increment)
        new_no = b.add(proposal.encrypted_no, no_increment)
        b.allow(new_yes, self.contract)
        b.allow(new_no, self.contract)

        return PendingVote(
            encrypted_yes=new_yes,
            encrypted_no=new_no,
            record=VoteRecord(
                proposal_id=proposal.id,
                voter=voter,
                choice=encrypted_choice,
                stake=amount,
                cast_at=now,
            ),
        )

    def commit(self, proposal: Proposal, pending: PendingVote) -> VoteRecord:
        """Apply a prepared vote to *proposal*."""
        record = pending.record
        proposal.encrypted_yes = pending.encrypted_yes
        proposal.encrypted_no = pending.encrypted_no
        proposal.total_voters += 1
        proposal.total_staked += record.stake

        logger.info(
            f"Proposal #{proposal.id}: encrypted vote accepted from {record.voter} "
            f"(stake={record.stake}, voters={proposal.total_voters})"
        )
        return record
