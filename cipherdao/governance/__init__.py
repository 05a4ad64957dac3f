"""
CipherDAO Confidential Governance

  - Proposal / VoteRecord / ProposalPhase       (proposals.py)
  - GovernanceSettings                          (admin.py)
  - AuthorizationPolicy / Action                (policy.py)
  - EncryptedTallyAggregator                    (tally.py)
  - DecryptionCoordinator / CallbackVerifier    (decryption.py)
  - TimeoutRefundManager / RefundReceipt        (refunds.py)
  - ExecutionGate                               (execution.py)
  - FundsLedger / InMemoryFundsLedger           (ledger.py)
  - ProposalRegistry                            (registry.py)
"""

from .admin import GovernanceSettings
from .decryption import CallbackVerifier, DecryptionCoordinator, IssuedRequest
from .errors import (
    AlreadyClaimedError,
    AlreadyExecutedError,
    AlreadyResolvedError,
    AlreadyVotedError,
    GovernanceError,
    InsufficientVotingPowerError,
    InvalidAttestationError,
    InvalidInputProofError,
    MalformedPayloadError,
    NoPendingRequestError,
    NotResolvedError,
    NoVoteRecordError,
    PhaseError,
    ProposalNotFoundError,
    ProposalPausedError,
    RefundsAlreadyEnabledError,
    RefundsDisabledError,
    RequestAlreadyIssuedError,
    RevealPeriodActiveError,
    SystemClosedError,
    TimeoutNotReachedError,
    UnauthorizedError,
    UnknownRequestError,
    ValidationError,
    VerificationError,
    VotingClosedError,
    VotingStillOpenError,
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
from .execution import ExecutionGate, outcome
from .ledger import FundsLedger, InMemoryFundsLedger, to_amount
from .policy import Action, AuthorizationPolicy, Decision
from .proposals import Proposal, ProposalPhase, VoteRecord
from .refunds import RefundReceipt, TimeoutRefundManager
from .registry import ProposalRegistry
from .tally import EncryptedTallyAggregator

__all__ = [
    # Core
    "ProposalRegistry",
    "Proposal",
    "ProposalPhase",
    "VoteRecord",
    # Components
    "EncryptedTallyAggregator",
    "DecryptionCoordinator",
    "CallbackVerifier",
    "IssuedRequest",
    "TimeoutRefundManager",
    "RefundReceipt",
    "ExecutionGate",
    "outcome",
    # Collaborators
    "GovernanceSettings",
    "AuthorizationPolicy",
    "Action",
    "Decision",
    "FundsLedger",
    "InMemoryFundsLedger",
    "to_amount",
    # Events
    "EventLog",
    "ProposalCreated",
    "VoteCommitted",
    "RevealRequested",
    "ProposalResolved",
    "ProposalExecuted",
    "RefundsEnabled",
    "RefundClaimed",
    "RefundTransferFailed",
    "ProposalPaused",
    # Errors
    "GovernanceError",
    "ValidationError",
    "ProposalNotFoundError",
    "InsufficientVotingPowerError",
    "UnauthorizedError",
    "PhaseError",
    "SystemClosedError",
    "ProposalPausedError",
    "VotingClosedError",
    "VotingStillOpenError",
    "AlreadyVotedError",
    "RequestAlreadyIssuedError",
    "NoPendingRequestError",
    "AlreadyResolvedError",
    "NotResolvedError",
    "RevealPeriodActiveError",
    "AlreadyExecutedError",
    "TimeoutNotReachedError",
    "RefundsAlreadyEnabledError",
    "RefundsDisabledError",
    "NoVoteRecordError",
    "AlreadyClaimedError",
    "VerificationError",
    "InvalidInputProofError",
    "InvalidAttestationError",
    "UnknownRequestError",
    "MalformedPayloadError",
]
