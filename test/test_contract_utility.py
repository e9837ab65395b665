#!/usr/bin/env python3
"""Tests for ContractUtility ABI loading and signing setup."""

import pytest
from eth_account import Account
from web3 import Web3

from erc20_bridge.utils.contract_utility import ContractUtility

from conftest import BACKING

TEST_KEY = "0x" + "4c" * 32
RPC_URL = "http://localhost:8545"


class TestContractAbi:
    """Bundled ABI files."""

    @pytest.mark.parametrize(
        "contract_name,functions",
        [
            ("BridgeBacking", {"assetLength", "allAssets", "assets", "registerToken",
                               "registerTokenBytes32", "crossSendToken", "crossChainSync"}),
            ("MappingTokenFactory", {"tokenLength", "allTokens", "tokenToInfo", "crossTransfer"}),
            ("Erc20String", {"symbol", "decimals", "balanceOf"}),
            ("Erc20Bytes32", {"symbol", "decimals"}),
        ],
    )
    def test_bundled_abis(self, contract_name, functions):
        abi = ContractUtility.get_contract_abi(contract_name)
        names = {entry["name"] for entry in abi if entry.get("type") == "function"}
        assert functions <= names

    def test_symbol_output_types_differ(self):
        string_abi = ContractUtility.get_contract_abi("Erc20String")
        bytes_abi = ContractUtility.get_contract_abi("Erc20Bytes32")

        def symbol_output(abi):
            return next(e for e in abi if e.get("name") == "symbol")["outputs"][0]["type"]

        assert symbol_output(string_abi) == "string"
        assert symbol_output(bytes_abi) == "bytes32"

    def test_token_to_info_outputs_backing_first(self):
        abi = ContractUtility.get_contract_abi("MappingTokenFactory")
        outputs = next(e for e in abi if e.get("name") == "tokenToInfo")["outputs"]
        assert [o["name"] for o in outputs][:2] == ["backing", "source"]

    def test_missing_contract(self):
        with pytest.raises(FileNotFoundError):
            ContractUtility.get_contract_abi("NoSuchContract")


class TestContractUtility:
    """Read-only and signing modes."""

    def test_requires_rpc_url(self):
        with pytest.raises(ValueError, match="RPC URL is required"):
            ContractUtility("")

    def test_read_only_mode(self):
        utility = ContractUtility(RPC_URL)
        assert utility.account is None
        assert utility.address is None

    def test_signing_mode(self):
        utility = ContractUtility(RPC_URL, TEST_KEY)
        expected = Account.from_key(TEST_KEY).address

        assert utility.address == expected
        assert utility.w3.eth.default_account == expected

    def test_contract_binds_checksum_address(self):
        utility = ContractUtility(RPC_URL)

        contract = utility.contract(BACKING, "BridgeBacking")

        assert contract.address == Web3.to_checksum_address(BACKING)
