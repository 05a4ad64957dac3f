"""
Confidential Proposals — lifecycle state

Defines the Proposal record, the per-voter VoteRecord, and the lifecycle
phase derived from a proposal's flags:

    OPEN ──(deadline)──▶ CLOSED ──request──▶ DECRYPTION_PENDING ──callback──▶ RESOLVED ──▶ EXECUTED
                                                     │
                                                     └──timeout / admin──▶ REFUND_ENABLED

``active`` is an orthogonal pause flag. Fields are written only by the
component that owns them: the tally aggregator writes the ciphertext handles
and counters, the callback verifier writes the revealed counts, the refund
manager writes ``refund_enabled`` and claim flags, the execution gate writes
``executed``.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import IntEnum
from typing import Any, Dict, List, Optional

from ..fhe import Handle
from ..logger import get_logger

logger = get_logger(__name__)


class ProposalPhase(IntEnum):
    """Lifecycle position derived from flags and the clock."""
    OPEN = 0                # Accepting encrypted votes
    CLOSED = 1              # Deadline passed, no reveal requested yet
    DECRYPTION_PENDING = 2  # Oracle request outstanding
    RESOLVED = 3            # Tally revealed by a verified callback
    EXECUTED = 4            # Outcome finalized
    REFUND_ENABLED = 5      # Oracle timed out or admin override; stakes claimable


@dataclass
class Proposal:
    """
    Confidential governance proposal.

    Fields:
        id:                      Monotonic identifier, starting at 1
        creator:                 Checksum address of the creator
        title / description:     Metadata
        created_at:              Ledger timestamp of creation
        voting_end:              created_at + voting duration
        encrypted_yes/no:        Ciphertext handles of the weighted tallies
        revealed_yes/no:         Cleartext tallies, meaningful iff resolved
        total_voters:            Number of accepted votes
        total_staked:            Sum of accepted stakes
        active:                  False once paused by an administrator
        decryption_request_id:   Oracle request id (0 = none)
        decryption_request_time: Ledger timestamp of the request
    """
    id: int
    creator: str
    title: str
    description: str
    created_at: int
    voting_end: int
    encrypted_yes: Handle
    encrypted_no: Handle
    revealed_yes: int = 0
    revealed_no: int = 0
    total_voters: int = 0
    total_staked: Decimal = field(default_factory=lambda: Decimal("0"))
    active: bool = True
    executed: bool = False
    resolved: bool = False
    refund_enabled: bool = False
    decryption_request_id: int = 0
    decryption_request_time: Optional[int] = None
    passed: Optional[bool] = None
    resolved_at: Optional[int] = None
    executed_at: Optional[int] = None
    refund_enabled_at: Optional[int] = None
    _history: List[Dict[str, Any]] = field(default_factory=list, repr=False)

    # ── Properties ────────────────────────────────────────────────────

    @property
    def paused(self) -> bool:
        return not self.active

    @property
    def history(self) -> List[Dict[str, Any]]:
        return list(self._history)

    def phase(self, now: int) -> ProposalPhase:
        if self.executed:
            return ProposalPhase.EXECUTED
        if self.refund_enabled:
            return ProposalPhase.REFUND_ENABLED
        if self.resolved:
            return ProposalPhase.RESOLVED
        if self.decryption_request_id != 0:
            return ProposalPhase.DECRYPTION_PENDING
        if now >= self.voting_end:
            return ProposalPhase.CLOSED
        return ProposalPhase.OPEN

    def is_voting_open(self, now: int) -> bool:
        return now < self.voting_end

    def record_transition(self, to: ProposalPhase, reason: str, timestamp: int):
        """Append to the audit trail and log the transition."""
        previous = self._history[-1]["to"] if self._history else "INIT"
        self._history.append({
            "from": previous,
            "to": to.name,
            "reason": reason,
            "timestamp": timestamp,
        })
        logger.info(f"Proposal #{self.id}: {previous} → {to.name} | {reason}")

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "creator": self.creator,
            "title": self.title,
            "description": self.description,
            "createdAt": self.created_at,
            "votingEnd": self.voting_end,
            "encryptedYes": self.encrypted_yes,
            "encryptedNo": self.encrypted_no,
            "revealedYes": self.revealed_yes,
            "revealedNo": self.revealed_no,
            "totalVoters": self.total_voters,
            "totalStaked": str(self.total_staked),
            "active": self.active,
            "executed": self.executed,
            "resolved": self.resolved,
            "refundEnabled": self.refund_enabled,
            "decryptionRequestId": self.decryption_request_id,
            "decryptionRequestTime": self.decryption_request_time,
            "passed": self.passed,
            "resolvedAt": self.resolved_at,
            "executedAt": self.executed_at,
            "refundEnabledAt": self.refund_enabled_at,
            "history": self.history,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        return cls(
            id=data["id"],
            creator=data["creator"],
            title=data["title"],
            description=data["description"],
            created_at=data["createdAt"],
            voting_end=data["votingEnd"],
            encrypted_yes=data["encryptedYes"],
            encrypted_no=data["encryptedNo"],
            revealed_yes=data.get("revealedYes", 0),
            revealed_no=data.get("revealedNo", 0),
            total_voters=data.get("totalVoters", 0),
            total_staked=Decimal(data.get("totalStaked", "0")),
            active=data.get("active", True),
            executed=data.get("executed", False),
            resolved=data.get("resolved", False),
            refund_enabled=data.get("refundEnabled", False),
            decryption_request_id=data.get("decryptionRequestId", 0),
            decryption_request_time=data.get("decryptionRequestTime"),
            passed=data.get("passed"),
            resolved_at=data.get("resolvedAt"),
            executed_at=data.get("executedAt"),
            refund_enabled_at=data.get("refundEnabledAt"),
            _history=list(data.get("history", [])),
        )

    def __repr__(self) -> str:
        flags = [
            name for name, on in (
                ("paused", self.paused),
                ("resolved", self.resolved),
                ("executed", self.executed),
                ("refunds", self.refund_enabled),
            ) if on
        ]
        return (
            f"<Proposal #{self.id} '{self.title}' voters={self.total_voters} "
            f"flags={','.join(flags) or '-'}>"
        )


@dataclass
class VoteRecord:
    """
    A voter's participation in one proposal, keyed by (proposal_id, voter).

    ``choice`` is the ciphertext handle of the encrypted choice; the protocol
    never reads it back. ``claimed`` flips once, when the stake is refunded.
    """
    proposal_id: int
    voter: str
    choice: Handle
    stake: Decimal
    voted: bool = True
    claimed: bool = False
    cast_at: Optional[int] = None
    claimed_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "voted": self.voted,
            "choice": self.choice,
            "stake": str(self.stake),
            "claimed": self.claimed,
            "castAt": self.cast_at,
            "claimedAt": self.claimed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoteRecord":
        return cls(
            proposal_id=data["proposalId"],
            voter=data["voter"],
            choice=data["choice"],
            stake=Decimal(data["stake"]),
            voted=data.get("voted", True),
            claimed=data.get("claimed", False),
            cast_at=data.get("castAt"),
            claimed_at=data.get("claimedAt"),
        )
