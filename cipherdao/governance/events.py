"""
Governance events.

Every successful entry point emits one immutable event into the registry's
EventLog. No event ever carries a vote choice.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar


@dataclass(frozen=True)
class ProposalCreated:
    proposal_id: int
    creator: str
    title: str
    voting_end: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ProposalCreated",
            "proposalId": self.proposal_id,
            "creator": self.creator,
            "title": self.title,
            "votingEnd": self.voting_end,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class VoteCommitted:
    """Commitment of an encrypted vote: who and how much, never which way."""
    proposal_id: int
    voter: str
    stake: Decimal
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "VoteCommitted",
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "stake": str(self.stake),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RevealRequested:
    proposal_id: int
    request_id: int
    requester: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RevealRequested",
            "proposalId": self.proposal_id,
            "requestId": self.request_id,
            "requester": self.requester,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProposalResolved:
    proposal_id: int
    request_id: int
    yes_votes: int
    no_votes: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ProposalResolved",
            "proposalId": self.proposal_id,
            "requestId": self.request_id,
            "yesVotes": self.yes_votes,
            "noVotes": self.no_votes,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProposalExecuted:
    proposal_id: int
    passed: bool
    yes_votes: int
    no_votes: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ProposalExecuted",
            "proposalId": self.proposal_id,
            "passed": self.passed,
            "yesVotes": self.yes_votes,
            "noVotes": self.no_votes,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RefundsEnabled:
    proposal_id: int
    forced: bool
    triggered_by: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RefundsEnabled",
            "proposalId": self.proposal_id,
            "forced": self.forced,
            "triggeredBy": self.triggered_by,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RefundClaimed:
    proposal_id: int
    voter: str
    amount: Decimal
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RefundClaimed",
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RefundTransferFailed:
    """The claim flag is set but the funds transfer reported failure."""
    proposal_id: int
    voter: str
    amount: Decimal
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RefundTransferFailed",
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProposalPaused:
    proposal_id: int
    admin: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ProposalPaused",
            "proposalId": self.proposal_id,
            "admin": self.admin,
            "timestamp": self.timestamp,
        }


E = TypeVar("E")


class EventLog:
    """Append-only list of emitted events."""

    def __init__(self):
        self._events: List[Any] = []

    def emit(self, event) -> None:
        self._events.append(event)

    def all(self) -> List[Any]:
        return list(self._events)

    def of_type(self, event_type: Type[E], proposal_id: Optional[int] = None) -> List[E]:
        return [
            e for e in self._events
            if isinstance(e, event_type)
            and (proposal_id is None or e.proposal_id == proposal_id)
        ]

    def last(self) -> Optional[Any]:
        return self._events[-1] if self._events else None

    def __len__(self) -> int:
        return len(self._events)

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._events]
