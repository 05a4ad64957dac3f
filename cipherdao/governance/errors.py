"""
Governance error taxonomy.

Every rejection raised by an entry point is one of these. Each class carries
a stable ``code`` so hosts can map failures to reason codes without parsing
messages. Raising always happens before any state is touched.
"""

from ..exceptions import CipherDAOException


class GovernanceError(CipherDAOException):
    """Base governance exception."""
    code = "GOVERNANCE_ERROR"


# ══════════════════════════════════════════════════════════════════════
#  VALIDATION
# ══════════════════════════════════════════════════════════════════════

class ValidationError(GovernanceError):
    """Malformed argument: address, amount, choice, string length."""
    code = "INVALID_ARGUMENT"


class ProposalNotFoundError(ValidationError):
    """No proposal with the given id."""
    code = "PROPOSAL_NOT_FOUND"


class InsufficientVotingPowerError(ValidationError):
    """Caller's registered weight is too low for the action."""
    code = "INSUFFICIENT_VOTING_POWER"


# ══════════════════════════════════════════════════════════════════════
#  AUTHORIZATION
# ══════════════════════════════════════════════════════════════════════

class UnauthorizedError(GovernanceError):
    """Caller is not permitted to perform the action."""
    code = "UNAUTHORIZED"


# ══════════════════════════════════════════════════════════════════════
#  LIFECYCLE PHASE
# ══════════════════════════════════════════════════════════════════════

class PhaseError(GovernanceError):
    """Action is not valid in the proposal's current lifecycle state."""
    code = "WRONG_PHASE"


class SystemClosedError(PhaseError):
    code = "SYSTEM_CLOSED"


class ProposalPausedError(PhaseError):
    code = "PROPOSAL_PAUSED"


class VotingClosedError(PhaseError):
    code = "VOTING_CLOSED"


class VotingStillOpenError(PhaseError):
    code = "VOTING_NOT_ENDED"


class AlreadyVotedError(PhaseError):
    code = "ALREADY_VOTED"


class RequestAlreadyIssuedError(PhaseError):
    code = "REQUEST_ALREADY_ISSUED"


class NoPendingRequestError(PhaseError):
    code = "NO_PENDING_REQUEST"


class AlreadyResolvedError(PhaseError):
    code = "ALREADY_RESOLVED"


class NotResolvedError(PhaseError):
    code = "NOT_RESOLVED"


class RevealPeriodActiveError(PhaseError):
    code = "REVEAL_PERIOD_NOT_ENDED"


class AlreadyExecutedError(PhaseError):
    code = "ALREADY_EXECUTED"


class TimeoutNotReachedError(PhaseError):
    code = "TIMEOUT_NOT_REACHED"


class RefundsAlreadyEnabledError(PhaseError):
    code = "REFUNDS_ALREADY_ENABLED"


class RefundsDisabledError(PhaseError):
    code = "REFUNDS_DISABLED"


class NoVoteRecordError(PhaseError):
    code = "NO_VOTE_RECORD"


class AlreadyClaimedError(PhaseError):
    code = "ALREADY_CLAIMED"


# ══════════════════════════════════════════════════════════════════════
#  CRYPTOGRAPHIC VERIFICATION
# ══════════════════════════════════════════════════════════════════════

class VerificationError(GovernanceError):
    """A proof or attestation did not verify."""
    code = "VERIFICATION_FAILED"


class InvalidInputProofError(VerificationError):
    code = "INVALID_INPUT_PROOF"


class InvalidAttestationError(VerificationError):
    code = "INVALID_ATTESTATION"


class UnknownRequestError(VerificationError):
    code = "UNKNOWN_REQUEST"


class MalformedPayloadError(VerificationError):
    code = "MALFORMED_PAYLOAD"
