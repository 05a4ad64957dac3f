"""
Mock coprocessor and local decryption oracle tests.
"""

import pytest

from conftest import ALICE, BOB, CONTRACT, COPROCESSOR_KEY, ORACLE_KEYS

from cipherdao.constants import EUINT64_MAX
from cipherdao.crypto import recover_signer, split_signatures
from cipherdao.fhe import FHEBackend, InputVerification, MockCoprocessor, UnknownHandleError
from cipherdao.oracle import (
    PAYLOAD_LENGTH,
    DecryptionOracle,
    LocalDecryptionOracle,
    OracleError,
    attestation_digest,
    decode_payload,
    encode_payload,
)


@pytest.fixture
def fhe():
    return MockCoprocessor(COPROCESSOR_KEY)


# ══════════════════════════════════════════════════════════════════════
#  COPROCESSOR
# ══════════════════════════════════════════════════════════════════════

class TestMockCoprocessor:

    def test_is_backend(self, fhe):
        assert isinstance(fhe, FHEBackend)
        assert fhe.signer_address == COPROCESSOR_KEY.address

    def test_handles_are_opaque_and_unique(self, fhe):
        a = fhe.as_encrypted(5)
        b = fhe.as_encrypted(5)
        assert a != b
        assert a.startswith("0x") and len(a) == 66

    def test_arithmetic(self, fhe):
        a = fhe.as_encrypted(40)
        b = fhe.as_encrypted(2)
        assert fhe.decrypt(fhe.add(a, b)) == 42
        assert fhe.decrypt(fhe.min(a, 7)) == 7
        assert fhe.decrypt(fhe.min(b, 7)) == 2

    def test_add_wraps_at_64_bits(self, fhe):
        top = fhe.as_encrypted(EUINT64_MAX)
        assert fhe.decrypt(fhe.add(top, fhe.as_encrypted(2))) == 1

    def test_select(self, fhe):
        yes = fhe.as_encrypted(1)
        ten, zero = fhe.as_encrypted(10), fhe.as_encrypted(0)
        assert fhe.decrypt(fhe.select(fhe.eq(yes, 1), ten, zero)) == 10
        assert fhe.decrypt(fhe.select(fhe.eq(yes, 0), ten, zero)) == 0

    def test_select_requires_boolean_condition(self, fhe):
        plain = fhe.as_encrypted(1)
        with pytest.raises(TypeError):
            fhe.select(plain, plain, plain)

    def test_unknown_handle(self, fhe):
        with pytest.raises(UnknownHandleError):
            fhe.decrypt("0x" + "00" * 32)

    def test_acl(self, fhe):
        h = fhe.as_encrypted(3)
        assert not fhe.is_allowed(h, ALICE)
        fhe.allow(h, ALICE)
        assert fhe.is_allowed(h, ALICE)
        assert not fhe.is_allowed(h, "garbage")

    def test_input_verification(self, fhe):
        enc = fhe.encrypt_input(250, CONTRACT, ALICE)
        result = fhe.verify_input(enc.handle, enc.proof, CONTRACT, ALICE)
        assert result == InputVerification.success(enc.handle)
        assert fhe.is_allowed(enc.handle, CONTRACT)

    def test_input_bound_to_user(self, fhe):
        enc = fhe.encrypt_input(250, CONTRACT, ALICE)
        result = fhe.verify_input(enc.handle, enc.proof, CONTRACT, BOB)
        assert not result.ok
        assert result.handle is None
        assert not fhe.is_allowed(enc.handle, CONTRACT)

    def test_input_with_bad_address(self, fhe):
        enc = fhe.encrypt_input(1, CONTRACT, ALICE)
        assert not fhe.verify_input(enc.handle, enc.proof, CONTRACT, "0xnope").ok

    def test_input_out_of_range(self, fhe):
        with pytest.raises(ValueError):
            fhe.encrypt_input(EUINT64_MAX + 1, CONTRACT, ALICE)

    def test_trace(self, fhe):
        fhe.eq(fhe.as_encrypted(1), 1)
        assert fhe.trace == ["as_encrypted", "eq"]
        fhe.clear_trace()
        assert fhe.trace == []


# ══════════════════════════════════════════════════════════════════════
#  PAYLOAD CODEC
# ══════════════════════════════════════════════════════════════════════

class TestPayload:

    def test_layout(self):
        payload = encode_payload(500, 7)
        assert len(payload) == PAYLOAD_LENGTH == 64
        assert payload[31] == 0xF4 and payload[30] == 0x01
        assert payload[63] == 7
        assert decode_payload(payload) == (500, 7)

    def test_encode_rejects_overflow(self):
        with pytest.raises(ValueError):
            encode_payload(EUINT64_MAX + 1, 0)

    @pytest.mark.parametrize("payload", [b"", b"\x00" * 63, b"\x00" * 65])
    def test_decode_rejects_length(self, payload):
        with pytest.raises(ValueError):
            decode_payload(payload)


# ══════════════════════════════════════════════════════════════════════
#  LOCAL ORACLE
# ══════════════════════════════════════════════════════════════════════

class TestLocalDecryptionOracle:

    def make(self, fhe, keys=ORACLE_KEYS):
        return LocalDecryptionOracle(fhe, keys, CONTRACT)

    def test_is_oracle(self, fhe):
        assert isinstance(self.make(fhe), DecryptionOracle)

    def test_requires_keys(self, fhe):
        with pytest.raises(ValueError):
            LocalDecryptionOracle(fhe, [], CONTRACT)

    def test_request_ids_increase(self, fhe):
        oracle = self.make(fhe)
        handles = [fhe.as_encrypted(1), fhe.as_encrypted(2)]
        first = oracle.request_decryption(handles, "cb", CONTRACT)
        second = oracle.request_decryption(handles, "cb", CONTRACT)
        assert (first, second) == (1, 2)
        assert oracle.pending() == [1, 2]

    def test_fulfill_attests_with_every_key(self, fhe):
        oracle = self.make(fhe)
        yes, no = fhe.as_encrypted(9), fhe.as_encrypted(4)
        fhe.allow(yes, CONTRACT)
        fhe.allow(no, CONTRACT)
        rid = oracle.request_decryption([yes, no], "cb", CONTRACT)

        response = oracle.fulfill(rid)
        assert decode_payload(response.payload) == (9, 4)
        digest = attestation_digest(oracle.chain_id, CONTRACT, rid, [yes, no], response.payload)
        signers = [recover_signer(digest, s) for s in split_signatures(response.attestation)]
        assert signers == oracle.signer_addresses
        assert oracle.pending() == []

    def test_refuses_handles_not_allowed(self, fhe):
        oracle = self.make(fhe)
        rid = oracle.request_decryption([fhe.as_encrypted(1), fhe.as_encrypted(2)], "cb", CONTRACT)
        with pytest.raises(OracleError, match="may not decrypt"):
            oracle.fulfill(rid)

    def test_unknown_request(self, fhe):
        with pytest.raises(OracleError):
            self.make(fhe).fulfill(99)

    def test_deliver_invokes_callback(self, fhe):
        oracle = self.make(fhe)
        handles = [fhe.as_encrypted(3), fhe.as_encrypted(1)]
        for h in handles:
            fhe.allow(h, CONTRACT)
        received = []
        oracle.register_callback("cb", lambda *args: received.append(args))
        rid = oracle.request_decryption(handles, "cb", CONTRACT)
        response = oracle.deliver(rid)
        assert received == [(rid, response.payload, response.attestation)]

    def test_deliver_without_callback(self, fhe):
        oracle = self.make(fhe)
        handles = [fhe.as_encrypted(3), fhe.as_encrypted(1)]
        for h in handles:
            fhe.allow(h, CONTRACT)
        rid = oracle.request_decryption(handles, "missing", CONTRACT)
        with pytest.raises(OracleError, match="No callback"):
            oracle.deliver(rid)
