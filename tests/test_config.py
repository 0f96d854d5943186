"""Tests for Settings properties and startup validation."""

import pytest
from pydantic import ValidationError

from hehehub.core.chain import build_web3
from hehehub.core.config import DEFAULT_BURN_ADDRESS, Settings


def test_defaults_in_test_env():
    settings = Settings()  # type: ignore[call-arg]

    assert settings.burn_address == DEFAULT_BURN_ADDRESS
    assert settings.event_batch_size == 1000
    assert settings.gas_buffer == 0.20


def test_rpc_url_derived_from_network():
    settings = Settings(  # type: ignore[call-arg]
        NETWORK="BASE_SEPOLIA", ALCHEMY_API_KEY="key123", RPC_URL=""
    )

    assert settings.resolved_rpc_url == "https://base-sepolia.g.alchemy.com/v2/key123"


def test_explicit_rpc_url_wins():
    settings = Settings(RPC_URL="http://localhost:8545", NETWORK="NOPE")  # type: ignore[call-arg]

    assert settings.resolved_rpc_url == "http://localhost:8545"


def test_unsupported_network():
    settings = Settings(NETWORK="NOPE", RPC_URL="")  # type: ignore[call-arg]

    with pytest.raises(ValueError, match="Unsupported network"):
        _ = settings.resolved_rpc_url
    assert build_web3(settings) is None


def test_cors_origins_list():
    settings = Settings(CORS_ORIGINS="http://a.test, http://b.test")  # type: ignore[call-arg]

    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


def test_production_requires_contract_and_rpc(monkeypatch):
    monkeypatch.delenv("HEHE_NFT_CONTRACT_ADDRESS", raising=False)
    monkeypatch.delenv("RPC_URL", raising=False)
    monkeypatch.delenv("ALCHEMY_API_KEY", raising=False)

    with pytest.raises(ValidationError, match="HEHE_NFT_CONTRACT_ADDRESS"):
        Settings(APP_ENV="production", _env_file=None)  # type: ignore[call-arg]
