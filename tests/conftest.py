"""Shared fixtures for mandate tests."""
from __future__ import annotations

import pytest
from eth_account import Account

from sardis_mandates import Mandate, caip10
from sardis_mandates.config import get_settings
from sardis_mandates.logging_config import clear_context

# Well-known development keys (Anvil/Hardhat accounts 0-2).
CLIENT_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
SERVER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
STRANGER_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"

CLIENT_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
SERVER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
STRANGER_ADDRESS = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

SWAP_CORE = {
    "kind": "swap@1",
    "payload": {
        "chainId": 1,
        "tokenIn": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        "tokenOut": "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
        "amountIn": "100000000",
        "minOut": "165000",
        "recipient": CLIENT_ADDRESS,
        "deadline": "2025-12-31T00:00:00Z",
    },
}


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh settings and logging context for every test."""
    get_settings.cache_clear()
    clear_context()
    yield
    get_settings.cache_clear()
    clear_context()


@pytest.fixture
def client_account():
    return Account.from_key(CLIENT_KEY)


@pytest.fixture
def server_account():
    return Account.from_key(SERVER_KEY)


@pytest.fixture
def stranger_account():
    return Account.from_key(STRANGER_KEY)


@pytest.fixture
def make_mandate():
    """Factory for an unsigned swap mandate between the client and server accounts."""

    def _make(**overrides) -> Mandate:
        fields = {
            "mandate_id": "mdt_test_0001",
            "client": caip10(1, CLIENT_ADDRESS),
            "server": caip10(1, SERVER_ADDRESS),
            "created_at": "2025-10-23T10:00:00.000Z",
            "deadline": "2025-10-23T10:20:00Z",
            "intent": "Swap 100 USDC for WBTC on Ethereum mainnet",
            "core": SWAP_CORE,
        }
        fields.update(overrides)
        return Mandate(**fields)

    return _make


@pytest.fixture
def domain():
    return {"name": "Mandate", "version": "1", "chainId": 1}
