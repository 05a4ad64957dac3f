"""
Configuration loader tests: TOML sections, env overrides, validation.
"""

from decimal import Decimal

import pytest

from conftest import CONTRACT, ORACLE_KEYS, OWNER, make_config

from cipherdao.config import DAOConfig, OracleConfig, ProtocolConfig, load_config
from cipherdao.constants import DECRYPTION_TIMEOUT, MIN_STAKE, VOTING_DURATION
from cipherdao.exceptions import ConfigurationError


TOML = f"""
[protocol]
voting_duration = 3600
reveal_period = 600
decryption_timeout = 1200
min_stake = "0.01"
max_stake = "5"

[oracle]
signers = ["{ORACLE_KEYS[0].address}", "{ORACLE_KEYS[1].address}"]
threshold = 2
chain_id = 8453

[contract]
address = "{CONTRACT}"
owner = "{OWNER}"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "CIPHERDAO_CONFIG",
        "CIPHERDAO_VOTING_DURATION",
        "CIPHERDAO_REVEAL_PERIOD",
        "CIPHERDAO_DECRYPTION_TIMEOUT",
        "CIPHERDAO_MIN_STAKE",
        "CIPHERDAO_MAX_STAKE",
        "CIPHERDAO_ORACLE_SIGNERS",
        "CIPHERDAO_ORACLE_THRESHOLD",
        "CIPHERDAO_CHAIN_ID",
        "CIPHERDAO_CONTRACT_ADDRESS",
        "CIPHERDAO_OWNER",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:

    def test_protocol_defaults(self):
        cfg = DAOConfig()
        assert cfg.protocol.voting_duration == VOTING_DURATION
        assert cfg.protocol.decryption_timeout == DECRYPTION_TIMEOUT
        assert cfg.protocol.min_stake == MIN_STAKE
        cfg.protocol.validate()

    def test_oracle_requires_signers(self):
        with pytest.raises(ConfigurationError, match="signer"):
            DAOConfig().oracle.validate()

    def test_missing_file_yields_defaults(self, tmp_path):
        cfg = DAOConfig.from_file(str(tmp_path / "absent.toml"))
        assert cfg.protocol.voting_duration == VOTING_DURATION
        assert cfg.oracle.signers == []


class TestFromFile:

    def test_sections_loaded(self, tmp_path):
        path = tmp_path / "cipherdao.toml"
        path.write_text(TOML)
        cfg = DAOConfig.from_file(str(path))

        assert cfg.protocol.voting_duration == 3600
        assert cfg.protocol.reveal_period == 600
        assert cfg.protocol.decryption_timeout == 1200
        assert cfg.protocol.min_stake == Decimal("0.01")
        assert cfg.protocol.max_stake == Decimal("5")
        assert cfg.oracle.threshold == 2
        assert cfg.oracle.chain_id == 8453
        assert cfg.contract.address == CONTRACT
        assert cfg.validate()

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "cipherdao.toml"
        path.write_text(TOML)
        monkeypatch.setenv("CIPHERDAO_VOTING_DURATION", "7200")
        monkeypatch.setenv("CIPHERDAO_ORACLE_SIGNERS", ORACLE_KEYS[2].address)
        monkeypatch.setenv("CIPHERDAO_ORACLE_THRESHOLD", "1")

        cfg = DAOConfig.from_file(str(path))
        assert cfg.protocol.voting_duration == 7200
        assert cfg.oracle.signers == [ORACLE_KEYS[2].address]
        assert cfg.oracle.threshold == 1

    def test_non_integer_env_rejected(self, monkeypatch):
        monkeypatch.setenv("CIPHERDAO_DECRYPTION_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError, match="integer"):
            ProtocolConfig().apply_env()

    def test_load_config_uses_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.toml"
        path.write_text(TOML)
        monkeypatch.setenv("CIPHERDAO_CONFIG", str(path))
        assert load_config().oracle.chain_id == 8453

    def test_load_config_explicit_path(self, tmp_path):
        path = tmp_path / "explicit.toml"
        path.write_text(TOML)
        assert load_config(str(path)).protocol.reveal_period == 600

    def test_to_dict(self, tmp_path):
        path = tmp_path / "cipherdao.toml"
        path.write_text(TOML)
        data = DAOConfig.from_file(str(path)).to_dict()
        assert data["protocol"]["min_stake"] == "0.01"
        assert data["oracle"]["threshold"] == 2
        assert data["contract"]["owner"] == OWNER


class TestValidation:

    def test_valid(self):
        assert make_config(ORACLE_KEYS, threshold=3).validate()

    def test_threshold_above_distinct_signers(self):
        cfg = make_config(ORACLE_KEYS[:1])
        cfg.oracle.signers = cfg.oracle.signers * 2
        cfg.oracle.threshold = 2
        with pytest.raises(ConfigurationError, match="threshold"):
            cfg.validate()

    def test_zero_threshold(self):
        cfg = make_config(ORACLE_KEYS)
        cfg.oracle.threshold = 0
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_bad_signer_address(self):
        cfg = OracleConfig(signers=["0x1234"])
        with pytest.raises(ConfigurationError, match="signer"):
            cfg.validate()

    def test_stake_bounds_inverted(self):
        cfg = ProtocolConfig(min_stake=Decimal("2"), max_stake=Decimal("1"))
        with pytest.raises(ConfigurationError, match="max_stake"):
            cfg.validate()

    def test_non_positive_duration(self):
        with pytest.raises(ConfigurationError, match="voting_duration"):
            ProtocolConfig(voting_duration=0).validate()

    def test_missing_contract_address(self):
        cfg = make_config(ORACLE_KEYS)
        cfg.contract.address = ""
        with pytest.raises(ConfigurationError, match="contract"):
            cfg.validate()

    def test_invalid_amount(self):
        with pytest.raises(ConfigurationError):
            ProtocolConfig.from_dict({"min_stake": "lots"})


class TestRegistryFromConfig:

    def test_contract_and_owner_from_config(self):
        from cipherdao.fhe import MockCoprocessor
        from cipherdao.governance import ProposalRegistry
        from cipherdao.oracle import LocalDecryptionOracle

        cfg = make_config(ORACLE_KEYS[:2], threshold=2)
        fhe = MockCoprocessor()
        oracle = LocalDecryptionOracle(fhe, ORACLE_KEYS[:2], CONTRACT)
        registry = ProposalRegistry.from_config(cfg, fhe, oracle, clock=lambda: 1_000.9)

        assert registry.contract == CONTRACT
        assert registry.settings.owner == OWNER
        assert registry.verifier.threshold == 2
        assert registry.current_time() == 1000

    def test_registry_rejects_unusable_oracle_config(self):
        from cipherdao.fhe import MockCoprocessor
        from cipherdao.governance import GovernanceSettings, ProposalRegistry
        from cipherdao.oracle import LocalDecryptionOracle

        fhe = MockCoprocessor()
        oracle = LocalDecryptionOracle(fhe, ORACLE_KEYS[:1], CONTRACT)
        with pytest.raises(ConfigurationError, match="signer"):
            ProposalRegistry(CONTRACT, GovernanceSettings(OWNER), fhe, oracle)
