"""
Shared helpers for the CipherDAO test suite.

A Harness wires a ProposalRegistry to the mock coprocessor, a local
decryption oracle and a controllable clock.
"""

import os
import sys
from decimal import Decimal
from typing import Optional, Sequence

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from cipherdao.config import DAOConfig
from cipherdao.crypto import PrivateKey, to_checksum_address
from cipherdao.fhe import MockCoprocessor
from cipherdao.governance import (
    FundsLedger,
    GovernanceSettings,
    InMemoryFundsLedger,
    ProposalRegistry,
)
from cipherdao.oracle import LocalDecryptionOracle


# ══════════════════════════════════════════════════════════════════════
#  ACCOUNTS
# ══════════════════════════════════════════════════════════════════════

OWNER = to_checksum_address("0x" + "0a" * 20)
ALICE = to_checksum_address("0x" + "a1" * 20)
BOB = to_checksum_address("0x" + "b2" * 20)
CAROL = to_checksum_address("0x" + "c3" * 20)
MALLORY = to_checksum_address("0x" + "ee" * 20)
CONTRACT = to_checksum_address("0x" + "c0" * 20)

WEIGHTS = {OWNER: 1000, ALICE: 500, BOB: 300, CAROL: 200}

COPROCESSOR_KEY = PrivateKey.from_int(0xC0FFEE)
ORACLE_KEYS = [PrivateKey.from_int(0x0AC1E00 + i) for i in range(3)]

START = 1_700_000_000


class FakeClock:
    """Ledger clock under test control."""

    def __init__(self, now: int = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds

    def set(self, timestamp: int) -> None:
        self.now = timestamp


def make_config(oracle_keys: Sequence[PrivateKey], threshold: int = 1) -> DAOConfig:
    config = DAOConfig()
    config.oracle.signers = [k.address for k in oracle_keys]
    config.oracle.threshold = threshold
    config.contract.address = CONTRACT
    config.contract.owner = OWNER
    return config


class Harness:
    """One governance contract with its collaborators."""

    def __init__(
        self,
        oracle_keys: Optional[Sequence[PrivateKey]] = None,
        threshold: int = 1,
        ledger: Optional[FundsLedger] = None,
    ):
        keys = list(oracle_keys or ORACLE_KEYS[:1])
        self.clock = FakeClock()
        self.coprocessor = MockCoprocessor(COPROCESSOR_KEY)
        self.oracle = LocalDecryptionOracle(self.coprocessor, keys, CONTRACT)
        self.config = make_config(keys, threshold)
        self.settings = GovernanceSettings(OWNER)
        self.ledger = ledger if ledger is not None else InMemoryFundsLedger()
        self.registry = ProposalRegistry(
            CONTRACT,
            self.settings,
            self.coprocessor,
            self.oracle,
            config=self.config,
            ledger=self.ledger,
            clock=self.clock,
        )
        self.oracle.register_callback(
            self.config.oracle.callback_id, self.registry.on_decryption_result
        )
        self.settings.set_multiple_voter_weights(
            OWNER, list(WEIGHTS), list(WEIGHTS.values())
        )

    def create(self, creator: str = OWNER, title: str = "Fund audit", description: str = "") -> int:
        return self.registry.create_proposal(creator, title, description)

    def vote(self, proposal_id: int, voter: str, choice: int, weight: Optional[int] = None, stake="1"):
        if weight is None:
            weight = self.settings.weight_of(voter)
        encrypted = self.coprocessor.encrypt_input(weight, CONTRACT, voter)
        return self.registry.submit_vote(
            voter, proposal_id, encrypted.handle, choice, encrypted.proof, Decimal(str(stake))
        )

    def end_voting(self, proposal_id: int) -> None:
        self.clock.set(self.registry.get_proposal(proposal_id).voting_end)

    def reveal(self, proposal_id: int, caller: str = OWNER) -> int:
        self.end_voting(proposal_id)
        return self.registry.request_reveal(caller, proposal_id)

    def resolve(self, proposal_id: int) -> int:
        request_id = self.reveal(proposal_id)
        self.oracle.deliver(request_id)
        return request_id

    def after_reveal_period(self, proposal_id: int) -> None:
        proposal = self.registry.get_proposal(proposal_id)
        self.clock.set(proposal.voting_end + self.config.protocol.reveal_period)


@pytest.fixture
def harness():
    return Harness()


@pytest.fixture
def dao(harness):
    return harness.registry
