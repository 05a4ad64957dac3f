"""
Administrative settings, authorization policy, ledger and events.
"""

from decimal import Decimal

import pytest

from conftest import ALICE, BOB, MALLORY, OWNER

from cipherdao.constants import EUINT64_MAX
from cipherdao.governance import (
    Action,
    AuthorizationPolicy,
    EventLog,
    GovernanceSettings,
    InMemoryFundsLedger,
    Proposal,
    RefundClaimed,
    UnauthorizedError,
    ValidationError,
    VoteCommitted,
    outcome,
    to_amount,
)


def make_proposal(creator=ALICE) -> Proposal:
    return Proposal(
        id=1,
        creator=creator,
        title="t",
        description="",
        created_at=0,
        voting_end=100,
        encrypted_yes="0x" + "11" * 32,
        encrypted_no="0x" + "22" * 32,
    )


class TestGovernanceSettings:

    def test_owner_is_admin(self):
        settings = GovernanceSettings(OWNER.lower())
        assert settings.owner == OWNER
        assert settings.is_admin(OWNER)
        assert not settings.is_admin(ALICE)
        assert not settings.is_admin("junk")

    def test_extra_administrators(self):
        settings = GovernanceSettings(OWNER, administrators=[BOB])
        assert settings.is_admin(BOB)
        settings.set_voter_weight(BOB, ALICE, 5)
        assert settings.weight_of(ALICE) == 5

    def test_weights(self):
        settings = GovernanceSettings(OWNER)
        assert settings.weight_of(ALICE) == 0
        settings.set_voter_weight(OWNER, ALICE, 42)
        assert settings.weight_of(ALICE.lower()) == 42

    def test_only_owner_sets_weights(self):
        settings = GovernanceSettings(OWNER)
        with pytest.raises(UnauthorizedError, match="Only owner can operate"):
            settings.set_voter_weight(ALICE, ALICE, 1000)
        assert settings.weight_of(ALICE) == 0

    @pytest.mark.parametrize("weight", [-1, 1.5, True, "10"])
    def test_invalid_weight(self, weight):
        with pytest.raises(ValidationError):
            GovernanceSettings(OWNER).set_voter_weight(OWNER, ALICE, weight)

    def test_weight_bounded_by_tally_range(self):
        settings = GovernanceSettings(OWNER)
        settings.set_voter_weight(OWNER, ALICE, EUINT64_MAX)
        assert settings.weight_of(ALICE) == EUINT64_MAX
        with pytest.raises(ValidationError, match="64-bit"):
            settings.set_voter_weight(OWNER, BOB, EUINT64_MAX + 10)
        with pytest.raises(ValidationError):
            settings.set_multiple_voter_weights(OWNER, [BOB], [EUINT64_MAX + 1])
        assert settings.weight_of(BOB) == 0

    def test_batch_weights(self):
        settings = GovernanceSettings(OWNER)
        settings.set_multiple_voter_weights(OWNER, [ALICE, BOB], [10, 20])
        assert (settings.weight_of(ALICE), settings.weight_of(BOB)) == (10, 20)

    def test_batch_length_mismatch(self):
        settings = GovernanceSettings(OWNER)
        with pytest.raises(ValidationError, match="Array length mismatch"):
            settings.set_multiple_voter_weights(OWNER, [ALICE, BOB], [10])

    def test_batch_is_all_or_nothing(self):
        settings = GovernanceSettings(OWNER)
        with pytest.raises(ValidationError):
            settings.set_multiple_voter_weights(OWNER, [ALICE, BOB], [10, -1])
        assert settings.weight_of(ALICE) == 0

    def test_voting_switch(self):
        settings = GovernanceSettings(OWNER)
        assert settings.voting_open
        settings.set_voting_open(OWNER, False)
        assert not settings.voting_open
        with pytest.raises(UnauthorizedError):
            settings.set_voting_open(MALLORY, True)

    def test_invalid_owner(self):
        with pytest.raises(ValidationError):
            GovernanceSettings("0x" + "00" * 20)

    def test_to_dict(self):
        settings = GovernanceSettings(OWNER)
        settings.set_voter_weight(OWNER, ALICE, 3)
        data = settings.to_dict()
        assert data["owner"] == OWNER
        assert data["voterWeights"] == {ALICE: 3}


class TestAuthorizationPolicy:

    policy = AuthorizationPolicy(lambda a: a == OWNER)

    def test_admin_only_actions(self):
        for action in (Action.FORCE_REFUND, Action.PAUSE_PROPOSAL, Action.SET_VOTER_WEIGHT):
            assert self.policy.evaluate(action, OWNER).allowed
            decision = self.policy.evaluate(action, ALICE)
            assert not decision.allowed
            assert decision.reason == "Only owner can operate"

    def test_reveal_by_creator_or_admin(self):
        proposal = make_proposal(creator=ALICE)
        assert self.policy.evaluate(Action.REQUEST_REVEAL, ALICE, proposal).allowed
        assert self.policy.evaluate(Action.REQUEST_REVEAL, OWNER, proposal).allowed
        assert not self.policy.evaluate(Action.REQUEST_REVEAL, BOB, proposal).allowed

    def test_reveal_needs_proposal(self):
        with pytest.raises(ValueError):
            self.policy.evaluate(Action.REQUEST_REVEAL, ALICE)

    def test_open_actions(self):
        for action in (Action.SUBMIT_VOTE, Action.TRIGGER_TIMEOUT, Action.CLAIM_REFUND, Action.EXECUTE):
            assert self.policy.evaluate(action, MALLORY).allowed

    def test_require_raises(self):
        with pytest.raises(UnauthorizedError, match="creator"):
            self.policy.require(Action.REQUEST_REVEAL, BOB, make_proposal())


class TestLedger:

    def test_receive_and_transfer(self):
        ledger = InMemoryFundsLedger()
        ledger.receive(ALICE, Decimal("2"))
        assert ledger.transfer(ALICE, Decimal("1.5"))
        assert ledger.balance == Decimal("0.5")
        assert ledger.paid_to(ALICE) == Decimal("1.5")

    def test_overdraft_reports_failure(self):
        ledger = InMemoryFundsLedger(Decimal("1"))
        assert not ledger.transfer(BOB, Decimal("2"))
        assert ledger.balance == Decimal("1")
        assert ledger.failed == [(BOB, Decimal("2"))]

    @pytest.mark.parametrize("value,expected", [
        ("0.001", Decimal("0.001")),
        (0.001, Decimal("0.001")),
        (3, Decimal("3")),
    ])
    def test_to_amount(self, value, expected):
        assert to_amount(value) == expected

    @pytest.mark.parametrize("value", [True, "abc", float("nan"), "Infinity", None])
    def test_to_amount_rejects(self, value):
        with pytest.raises(ValidationError):
            to_amount(value)


class TestEventsAndOutcome:

    def test_event_log_filters(self):
        log = EventLog()
        log.emit(VoteCommitted(1, ALICE, Decimal("1"), 10))
        log.emit(VoteCommitted(2, BOB, Decimal("1"), 11))
        log.emit(RefundClaimed(1, ALICE, Decimal("1"), 12))
        assert len(log) == 3
        assert len(log.of_type(VoteCommitted)) == 2
        assert len(log.of_type(VoteCommitted, proposal_id=2)) == 1
        assert isinstance(log.last(), RefundClaimed)
        assert [e["event"] for e in log.to_list()] == ["VoteCommitted", "VoteCommitted", "RefundClaimed"]

    def test_events_are_immutable(self):
        event = VoteCommitted(1, ALICE, Decimal("1"), 10)
        with pytest.raises(Exception):
            event.stake = Decimal("100")

    @pytest.mark.parametrize("yes,no,passed", [(1, 0, True), (5, 5, False), (0, 0, False), (2, 3, False)])
    def test_strict_majority(self, yes, no, passed):
        assert outcome(yes, no) is passed
