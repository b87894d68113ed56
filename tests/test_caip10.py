"""Tests for CAIP-10 chain-qualified addresses."""
from __future__ import annotations

import pytest

from sardis_mandates.caip10 import ChainAddress, address_from_caip10, caip10
from sardis_mandates.exceptions import MalformedIdentifier

CLIENT_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class TestParse:
    def test_segments(self):
        parsed = ChainAddress.parse(f"eip155:1:{CLIENT_ADDRESS}")
        assert parsed.namespace == "eip155"
        assert parsed.chain_id == "1"
        assert parsed.address == CLIENT_ADDRESS

    def test_str_is_original_identifier(self):
        identifier = f"eip155:8453:{CLIENT_ADDRESS}"
        assert str(ChainAddress.parse(identifier)) == identifier

    def test_parse_is_idempotent(self):
        parsed = ChainAddress.parse(f"eip155:1:{CLIENT_ADDRESS}")
        assert ChainAddress.parse(parsed) is parsed

    @pytest.mark.parametrize(
        "identifier",
        [
            "",
            CLIENT_ADDRESS,
            f"eip155:{CLIENT_ADDRESS}",
            f"eip155:1:{CLIENT_ADDRESS}:extra",
            "eip155:1:",
            ":1:0xabc",
        ],
    )
    def test_malformed(self, identifier):
        with pytest.raises(MalformedIdentifier):
            ChainAddress.parse(identifier)

    def test_non_string_rejected(self):
        with pytest.raises(MalformedIdentifier):
            ChainAddress.parse(1234)


class TestEquality:
    def test_address_case_ignored(self):
        checksummed = ChainAddress.parse(f"eip155:1:{CLIENT_ADDRESS}")
        lowered = ChainAddress.parse(f"eip155:1:{CLIENT_ADDRESS.lower()}")
        assert checksummed == lowered
        assert hash(checksummed) == hash(lowered)

    def test_chain_matters(self):
        assert ChainAddress.parse(f"eip155:1:{CLIENT_ADDRESS}") != ChainAddress.parse(
            f"eip155:10:{CLIENT_ADDRESS}"
        )

    def test_compares_with_string(self):
        assert ChainAddress.parse(f"eip155:1:{CLIENT_ADDRESS}") == f"eip155:1:{CLIENT_ADDRESS.lower()}"
        assert ChainAddress.parse(f"eip155:1:{CLIENT_ADDRESS}") != "not-an-identifier"


class TestHelpers:
    def test_build(self):
        assert caip10(1, CLIENT_ADDRESS) == f"eip155:1:{CLIENT_ADDRESS}"
        assert caip10("8453", CLIENT_ADDRESS, namespace="eip155") == f"eip155:8453:{CLIENT_ADDRESS}"

    def test_address_from_caip10(self):
        assert address_from_caip10(f"eip155:1:{CLIENT_ADDRESS}") == CLIENT_ADDRESS
