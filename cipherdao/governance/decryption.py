"""
Decryption Request Coordinator and Callback Verifier

requestReveal hands the two tally handles to the external oracle and returns
at once. The oracle answers later, through ``on_decryption_result``, with a
cleartext payload and an attestation. The verifier authenticates that answer
against the request it was issued for and resolves the proposal at most once.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from ..config import OracleConfig
from ..crypto import recover_signer, split_signatures, to_checksum_address
from ..exceptions import InvalidSignatureError
from ..logger import get_logger
from ..oracle import DecryptionOracle, attestation_digest, decode_payload
from .admin import GovernanceSettings
from .errors import (
    AlreadyResolvedError,
    GovernanceError,
    InvalidAttestationError,
    MalformedPayloadError,
    ProposalPausedError,
    RefundsAlreadyEnabledError,
    RequestAlreadyIssuedError,
    UnknownRequestError,
    VotingStillOpenError,
)
from .policy import Action
from .proposals import Proposal, ProposalPhase

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedRequest:
    """Reverse-index entry: which proposal and which ciphertexts a request covers."""
    request_id: int
    proposal_id: int
    handles: Tuple[str, str]
    requested_at: int


class DecryptionCoordinator:
    """
    Issues oracle requests and owns the ``request_id → proposal`` index.
    """

    def __init__(
        self,
        oracle: DecryptionOracle,
        settings: GovernanceSettings,
        contract: str,
        callback_id: str,
    ):
        self.oracle = oracle
        self.settings = settings
        self.contract = contract
        self.callback_id = callback_id
        self._requests: Dict[int, IssuedRequest] = {}

    def lookup(self, request_id: int) -> Optional[IssuedRequest]:
        return self._requests.get(request_id)

    def issued(self) -> Iterable[IssuedRequest]:
        return list(self._requests.values())

    def request_reveal(self, proposal: Proposal, caller: str, now: int) -> IssuedRequest:
        if proposal.resolved:
            raise AlreadyResolvedError(f"Proposal #{proposal.id} already resolved")
        if proposal.refund_enabled:
            raise RefundsAlreadyEnabledError(f"Proposal #{proposal.id} is in refund mode")
        if proposal.decryption_request_id != 0:
            raise RequestAlreadyIssuedError(
                f"Proposal #{proposal.id} already has request #{proposal.decryption_request_id}"
            )
        if proposal.is_voting_open(now):
            raise VotingStillOpenError("Voting still in progress")
        if not proposal.active:
            raise ProposalPausedError(f"Proposal #{proposal.id} not active")
        self.settings.policy.require(Action.REQUEST_REVEAL, caller, proposal)

        handles = (proposal.encrypted_yes, proposal.encrypted_no)
        request_id = self.oracle.request_decryption(list(handles), self.callback_id, self.contract)
        if request_id <= 0 or request_id in self._requests:
            raise GovernanceError(f"Oracle returned unusable request id {request_id}")

        issued = IssuedRequest(
            request_id=request_id,
            proposal_id=proposal.id,
            handles=handles,
            requested_at=now,
        )
        self._requests[request_id] = issued
        proposal.decryption_request_id = request_id
        proposal.decryption_request_time = now
        proposal.record_transition(
            ProposalPhase.DECRYPTION_PENDING, f"request #{request_id} by {caller}", now
        )
        return issued


class CallbackVerifier:
    """
    Single writer of revealed counts.

    Args:
        coordinator: source of the request index
        config:      authorized signers, threshold, chain id
        contract:    contract address bound into attestations
    """

    def __init__(self, coordinator: DecryptionCoordinator, config: OracleConfig, contract: str):
        self.coordinator = coordinator
        self.signers = frozenset(to_checksum_address(s) for s in config.signers)
        self.threshold = config.threshold
        self.chain_id = config.chain_id
        self.contract = contract

    def check_attestation(self, request: IssuedRequest, payload: bytes, attestation: bytes) -> None:
        """
        Raises:
            InvalidAttestationError: fewer than ``threshold`` distinct
                authorized signers recovered
        """
        digest = attestation_digest(
            self.chain_id, self.contract, request.request_id, request.handles, payload
        )
        try:
            signatures = split_signatures(bytes(attestation))
        except InvalidSignatureError as e:
            raise InvalidAttestationError(str(e))

        recovered = set()
        for signature in signatures:
            try:
                signer = recover_signer(digest, signature)
            except InvalidSignatureError:
                continue
            if signer in self.signers:
                recovered.add(signer)

        if len(recovered) < self.threshold:
            raise InvalidAttestationError(
                f"Attestation for request #{request.request_id} has {len(recovered)} "
                f"valid oracle signatures, {self.threshold} required"
            )

    def on_decryption_result(
        self,
        proposal_for,
        request_id: int,
        payload: bytes,
        attestation: bytes,
        now: int,
    ) -> Tuple[Proposal, int, int]:
        """
        Authenticate and apply an oracle result.

        Args:
            proposal_for: Callable(proposal_id) → Proposal

        Returns:
            (proposal, yes, no)
        """
        request = self.coordinator.lookup(request_id)
        if request is None:
            raise UnknownRequestError(f"Unknown decryption request #{request_id}")
        proposal = proposal_for(request.proposal_id)

        if proposal.resolved:
            raise AlreadyResolvedError(f"Proposal #{proposal.id} already resolved")
        if proposal.refund_enabled:
            raise RefundsAlreadyEnabledError(
                f"Proposal #{proposal.id} is in refund mode; late result for request #{request_id} ignored"
            )
        if proposal.decryption_request_id != request_id:
            raise UnknownRequestError(
                f"Request #{request_id} is not the outstanding request of proposal #{proposal.id}"
            )

        try:
            self.check_attestation(request, payload, attestation)
        except InvalidAttestationError as e:
            logger.warning(f"Proposal #{proposal.id}: callback REJECTED: {e}")
            raise
        try:
            yes, no = decode_payload(payload)
        except ValueError as e:
            raise MalformedPayloadError(str(e))

        proposal.revealed_yes = yes
        proposal.revealed_no = no
        proposal.resolved = True
        proposal.resolved_at = now
        proposal.record_transition(
            ProposalPhase.RESOLVED, f"request #{request_id} yes={yes} no={no}", now
        )
        return proposal, yes, no
