"""
Proposal Registry

Entry point of the confidential governance contract. Owns every Proposal,
VoteRecord and request-index entry for its lifetime and routes each call to
the one component allowed to write the fields it touches:

    EncryptedTallyAggregator  → ciphertext handles, voter/stake counters
    DecryptionCoordinator     → request id / time, request index
    CallbackVerifier          → revealed counts, resolved
    TimeoutRefundManager      → refund_enabled, claim flags
    ExecutionGate             → executed, passed

Every entry point runs under one re-entrant lock, validates completely
before mutating, and emits exactly one event on success.
"""

import functools
import threading
import time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import DAOConfig
from ..fhe import FHEBackend, Handle
from ..logger import get_logger
from ..oracle import DecryptionOracle
from .admin import GovernanceSettings, normalize
from .decryption import CallbackVerifier, DecryptionCoordinator
from .errors import (
    AlreadyExecutedError,
    InsufficientVotingPowerError,
    ProposalNotFoundError,
    ProposalPausedError,
    SystemClosedError,
    ValidationError,
)
from .events import (
    EventLog,
    ProposalCreated,
    ProposalExecuted,
    ProposalPaused,
    ProposalResolved,
    RefundClaimed,
    RefundsEnabled,
    RefundTransferFailed,
    RevealRequested,
    VoteCommitted,
)
from .execution import ExecutionGate
from .ledger import FundsLedger, InMemoryFundsLedger
from .policy import Action
from .proposals import Proposal, ProposalPhase, VoteRecord
from .refunds import RefundReceipt, TimeoutRefundManager
from .tally import EncryptedTallyAggregator

logger = get_logger(__name__)


def _locked(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class ProposalRegistry:
    """
    Confidential stake-weighted proposal voting.

    Args:
        contract: address of this governance contract
        settings: administrative settings (owner, weights, global switch)
        backend:  FHE coprocessor
        oracle:   decryption oracle
        config:   protocol and oracle configuration
        ledger:   escrow for stakes (in-memory if omitted)
        clock:    Callable() → ledger timestamp in seconds (time.time if omitted)
    """

    def __init__(
        self,
        contract: str,
        settings: GovernanceSettings,
        backend: FHEBackend,
        oracle: DecryptionOracle,
        config: Optional[DAOConfig] = None,
        ledger: Optional[FundsLedger] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.contract = normalize(contract)
        self.config = config or DAOConfig()
        self.config.protocol.validate()
        self.config.oracle.validate()

        self.settings = settings
        self.backend = backend
        self.oracle = oracle
        self.ledger = ledger if ledger is not None else InMemoryFundsLedger()
        self._clock = clock or time.time
        self._lock = threading.RLock()

        self._proposals: Dict[int, Proposal] = {}
        self._votes: Dict[Tuple[int, str], VoteRecord] = {}
        self.events = EventLog()

        protocol = self.config.protocol
        self.aggregator = EncryptedTallyAggregator(backend, self.contract, settings, protocol)
        self.coordinator = DecryptionCoordinator(
            oracle, settings, self.contract, self.config.oracle.callback_id
        )
        self.verifier = CallbackVerifier(self.coordinator, self.config.oracle, self.contract)
        self.refunds = TimeoutRefundManager(settings, self.ledger, protocol)
        self.gate = ExecutionGate(protocol)

        logger.info(
            f"Governance contract {self.contract} ready "
            f"(owner={settings.owner}, oracle threshold={self.config.oracle.threshold})"
        )

    @classmethod
    def from_config(
        cls,
        config: DAOConfig,
        backend: FHEBackend,
        oracle: DecryptionOracle,
        ledger: Optional[FundsLedger] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "ProposalRegistry":
        """Build a registry whose contract and owner come from ``[contract]``."""
        config.validate()
        settings = GovernanceSettings(config.contract.owner)
        return cls(
            config.contract.address,
            settings,
            backend,
            oracle,
            config=config,
            ledger=ledger,
            clock=clock,
        )

    # ── Internals ─────────────────────────────────────────────────────

    def current_time(self) -> int:
        return int(self._clock())

    def _proposal(self, proposal_id: int) -> Proposal:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError("Proposal does not exist")
        return proposal

    # ══════════════════════════════════════════════════════════════════
    #  ENTRY POINTS
    # ══════════════════════════════════════════════════════════════════

    @_locked
    def create_proposal(self, caller: str, title: str, description: str = "") -> int:
        caller = normalize(caller)
        protocol = self.config.protocol
        if not self.settings.voting_open:
            raise SystemClosedError("Voting system is closed")
        if self.settings.weight_of(caller) < protocol.min_voting_power:
            raise InsufficientVotingPowerError(
                f"Insufficient voting power to create a proposal "
                f"({self.settings.weight_of(caller)} < {protocol.min_voting_power})"
            )
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title must not be empty")
        if len(title) > protocol.max_title_length:
            raise ValidationError(f"Title longer than {protocol.max_title_length} characters")
        if not isinstance(description, str) or len(description) > protocol.max_description_length:
            raise ValidationError(
                f"Description longer than {protocol.max_description_length} characters"
            )

        now = self.current_time()
        encrypted_yes, encrypted_no = self.aggregator.initialize()
        proposal = Proposal(
            id=len(self._proposals) + 1,
            creator=caller,
            title=title,
            description=description,
            created_at=now,
            voting_end=now + protocol.voting_duration,
            encrypted_yes=encrypted_yes,
            encrypted_no=encrypted_no,
        )
        self._proposals[proposal.id] = proposal
        proposal.record_transition(ProposalPhase.OPEN, f"created by {caller}", now)
        self.events.emit(ProposalCreated(
            proposal_id=proposal.id,
            creator=caller,
            title=title,
            voting_end=proposal.voting_end,
            timestamp=now,
        ))
        return proposal.id

    @_locked
    def submit_vote(
        self,
        caller: str,
        proposal_id: int,
        encrypted_weight: Handle,
        choice: int,
        proof: bytes,
        stake,
    ) -> VoteRecord:
        caller = normalize(caller)
        proposal = self._proposal(proposal_id)
        now = self.current_time()

        pending = self.aggregator.prepare_vote(
            proposal,
            caller,
            encrypted_weight,
            proof,
            choice,
            stake,
            already_voted=(proposal_id, caller) in self._votes,
            now=now,
        )
        # Stake is escrowed before any proposal or vote-record write.
        self.ledger.receive(caller, pending.record.stake)
        record = self.aggregator.commit(proposal, pending)
        self._votes[(proposal_id, caller)] = record
        self.events.emit(VoteCommitted(
            proposal_id=proposal_id,
            voter=caller,
            stake=record.stake,
            timestamp=now,
        ))
        return record

    @_locked
    def request_reveal(self, caller: str, proposal_id: int) -> int:
        caller = normalize(caller)
        proposal = self._proposal(proposal_id)
        now = self.current_time()
        issued = self.coordinator.request_reveal(proposal, caller, now)
        self.events.emit(RevealRequested(
            proposal_id=proposal_id,
            request_id=issued.request_id,
            requester=caller,
            timestamp=now,
        ))
        return issued.request_id

    @_locked
    def on_decryption_result(self, request_id: int, payload: bytes, attestation: bytes) -> None:
        now = self.current_time()
        proposal, yes, no = self.verifier.on_decryption_result(
            self._proposal, request_id, payload, attestation, now
        )
        self.events.emit(ProposalResolved(
            proposal_id=proposal.id,
            request_id=request_id,
            yes_votes=yes,
            no_votes=no,
            timestamp=now,
        ))

    @_locked
    def trigger_timeout(self, caller: str, proposal_id: int) -> None:
        caller = normalize(caller)
        proposal = self._proposal(proposal_id)
        now = self.current_time()
        self.refunds.trigger_timeout(proposal, caller, now)
        self.events.emit(RefundsEnabled(
            proposal_id=proposal_id,
            forced=False,
            triggered_by=caller,
            timestamp=now,
        ))

    @_locked
    def admin_force_refund(self, caller: str, proposal_id: int) -> None:
        caller = normalize(caller)
        proposal = self._proposal(proposal_id)
        now = self.current_time()
        self.refunds.admin_force_refund(proposal, caller, now)
        self.events.emit(RefundsEnabled(
            proposal_id=proposal_id,
            forced=True,
            triggered_by=caller,
            timestamp=now,
        ))

    @_locked
    def claim_refund(self, caller: str, proposal_id: int) -> RefundReceipt:
        caller = normalize(caller)
        proposal = self._proposal(proposal_id)
        now = self.current_time()
        receipt = self.refunds.claim_refund(
            proposal, self._votes.get((proposal_id, caller)), caller, now
        )
        event_type = RefundClaimed if receipt.paid else RefundTransferFailed
        self.events.emit(event_type(
            proposal_id=proposal_id,
            voter=caller,
            amount=receipt.amount,
            timestamp=now,
        ))
        return receipt

    @_locked
    def execute(self, caller: str, proposal_id: int) -> bool:
        caller = normalize(caller)
        proposal = self._proposal(proposal_id)
        now = self.current_time()
        passed = self.gate.execute(proposal, caller, now)
        self.events.emit(ProposalExecuted(
            proposal_id=proposal_id,
            passed=passed,
            yes_votes=proposal.revealed_yes,
            no_votes=proposal.revealed_no,
            timestamp=now,
        ))
        return passed

    @_locked
    def pause_proposal(self, caller: str, proposal_id: int) -> None:
        caller = normalize(caller)
        proposal = self._proposal(proposal_id)
        self.settings.policy.require(Action.PAUSE_PROPOSAL, caller, proposal)
        if proposal.executed:
            raise AlreadyExecutedError(f"Proposal #{proposal_id} already executed")
        if not proposal.active:
            raise ProposalPausedError(f"Proposal #{proposal_id} already paused")
        now = self.current_time()
        proposal.active = False
        logger.warning(f"Proposal #{proposal_id}: PAUSED by {caller}")
        self.events.emit(ProposalPaused(proposal_id=proposal_id, admin=caller, timestamp=now))

    # ══════════════════════════════════════════════════════════════════
    #  QUERIES
    # ══════════════════════════════════════════════════════════════════

    @_locked
    def get_proposal(self, proposal_id: int) -> Proposal:
        return self._proposal(proposal_id)

    @_locked
    def get_vote_record(self, proposal_id: int, voter: str) -> Optional[VoteRecord]:
        return self._votes.get((proposal_id, normalize(voter)))

    @_locked
    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return (proposal_id, normalize(voter)) in self._votes

    @_locked
    def proposal_count(self) -> int:
        return len(self._proposals)

    @_locked
    def phase_of(self, proposal_id: int) -> ProposalPhase:
        return self._proposal(proposal_id).phase(self.current_time())

    @_locked
    def get_voting_status(self, proposal_id: int) -> str:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            return "Proposal does not exist"
        if not proposal.active:
            return "Proposal not active"
        now = self.current_time()
        phase = proposal.phase(now)
        if phase == ProposalPhase.RESOLVED:
            if now < self.gate.executable_at(proposal):
                return "Reveal phase"
            return "Awaiting execution"
        return {
            ProposalPhase.OPEN: "Voting in progress",
            ProposalPhase.CLOSED: "Awaiting reveal request",
            ProposalPhase.DECRYPTION_PENDING: "Decryption pending",
            ProposalPhase.REFUND_ENABLED: "Refunds enabled",
            ProposalPhase.EXECUTED: "Executed",
        }[phase]

    @_locked
    def total_refunded(self, proposal_id: int) -> Decimal:
        self._proposal(proposal_id)
        return self.refunds.refunded(proposal_id)

    @_locked
    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of registry state for diagnostics."""
        votes: List[Dict[str, Any]] = [r.to_dict() for r in self._votes.values()]
        return {
            "contract": self.contract,
            "settings": self.settings.to_dict(),
            "proposals": [p.to_dict() for p in self._proposals.values()],
            "votes": votes,
            "requests": {
                str(r.request_id): r.proposal_id for r in self.coordinator.issued()
            },
            "events": self.events.to_list(),
            "config": self.config.to_dict(),
        }

    def __repr__(self) -> str:
        return f"<ProposalRegistry {self.contract} proposals={len(self._proposals)}>"
