"""
Execution Gate

Finalizes a resolved proposal once the reveal period has elapsed. Reads the
revealed counts and nothing else. A tie does not pass.
"""

from ..config import ProtocolConfig
from .errors import (
    AlreadyExecutedError,
    NotResolvedError,
    ProposalPausedError,
    RevealPeriodActiveError,
)
from .proposals import Proposal, ProposalPhase


def outcome(yes: int, no: int) -> bool:
    """Strict majority."""
    return yes > no


class ExecutionGate:
    """Sole writer of ``executed`` and ``passed``."""

    def __init__(self, config: ProtocolConfig):
        self.config = config

    def executable_at(self, proposal: Proposal) -> int:
        return proposal.voting_end + self.config.reveal_period

    def execute(self, proposal: Proposal, caller: str, now: int) -> bool:
        if proposal.executed:
            raise AlreadyExecutedError(f"Proposal #{proposal.id} already executed")
        if not proposal.active:
            raise ProposalPausedError(f"Proposal #{proposal.id} not active")
        if not proposal.resolved:
            raise NotResolvedError(f"Proposal #{proposal.id} not resolved")
        if now < self.executable_at(proposal):
            raise RevealPeriodActiveError("Reveal period not ended")

        passed = outcome(proposal.revealed_yes, proposal.revealed_no)
        proposal.executed = True
        proposal.passed = passed
        proposal.executed_at = now
        proposal.record_transition(
            ProposalPhase.EXECUTED,
            f"{'PASSED' if passed else 'REJECTED'} by {caller}",
            now,
        )
        return passed
