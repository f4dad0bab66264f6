import json
import logging

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from core.exceptions import ConfigError
from core.wallet_manager import (
    Wallet,
    load_private_keys,
    load_wallets,
    load_wallets_json,
)

from conftest import TEST_ADDRESS, TEST_PRIVATE_KEY


class TestWallet:
    """Test suite for the Wallet signer."""

    def test_from_prefixed_key(self):
        assert Wallet.from_private_key(TEST_PRIVATE_KEY).address == TEST_ADDRESS

    def test_from_unprefixed_key(self):
        assert Wallet.from_private_key(TEST_PRIVATE_KEY[2:]).address == TEST_ADDRESS

    @pytest.mark.parametrize("key", ["", "0x1234", "not-a-key", "0x" + "zz" * 32])
    def test_invalid_key_raises_config_error(self, key):
        with pytest.raises(ConfigError) as exc:
            Wallet.from_private_key(key)
        assert exc.value.reason == "config"
        if key:
            assert key not in str(exc.value)

    def test_signature_recovers_to_address(self, wallet):
        message = "mission.superintent.ai wants you to sign in"
        signature = wallet.sign_message(message)
        assert signature.startswith("0x")
        # 65-byte r || s || v
        assert len(signature) == 2 + 130
        recovered = Account.recover_message(encode_defunct(text=message), signature=signature)
        assert recovered == wallet.address

    def test_repr_never_contains_key(self, wallet):
        text = repr(wallet)
        assert TEST_ADDRESS in text
        assert TEST_PRIVATE_KEY[2:] not in text


class TestLoadPrivateKeys:

    def test_reads_keys_skipping_comments(self, tmp_path):
        path = tmp_path / "pk.txt"
        path.write_text(
            f"# main wallet\n{TEST_PRIVATE_KEY}\n\n   \n{'0x' + '1' * 64}\n",
            encoding="utf-8",
        )
        assert load_private_keys(str(path)) == [TEST_PRIVATE_KEY, "0x" + "1" * 64]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="file not found"):
            load_private_keys(str(tmp_path / "pk.txt"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "pk.txt"
        path.write_text("\n# nothing here\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="No private keys found"):
            load_private_keys(str(path))


class TestLoadWalletsJson:

    def test_reads_private_keys(self, tmp_path):
        path = tmp_path / "wallets.json"
        path.write_text(json.dumps([
            {"address": TEST_ADDRESS, "privateKey": TEST_PRIVATE_KEY},
            {"address": "0x0"},
            {"privateKey": " " + "2" * 64 + " "},
        ]), encoding="utf-8")
        assert load_wallets_json(str(path)) == [TEST_PRIVATE_KEY, "2" * 64]

    @pytest.mark.parametrize("content", ["[]", "{}", json.dumps({"privateKey": "0x1"})])
    def test_not_a_wallet_list(self, tmp_path, content):
        path = tmp_path / "wallets.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigError, match="No wallets found"):
            load_wallets_json(str(path))

    def test_entries_without_keys(self, tmp_path):
        path = tmp_path / "wallets.json"
        path.write_text(json.dumps([{"address": "0x1"}, "junk"]), encoding="utf-8")
        with pytest.raises(ConfigError, match="No valid private keys"):
            load_wallets_json(str(path))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "wallets.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(ConfigError, match="Failed to read"):
            load_wallets_json(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_wallets_json(str(tmp_path / "wallets.json"))


class TestLoadWallets:

    def test_preserves_order(self):
        keys = ["0x" + f"{n:064x}" for n in (3, 1, 2)]
        wallets = load_wallets(keys)
        assert [w.address for w in wallets] == [
            Wallet.from_private_key(k).address for k in keys
        ]

    def test_skips_invalid_keys_by_position(self, caplog):
        with caplog.at_level(logging.ERROR):
            wallets = load_wallets(["bogus-key", TEST_PRIVATE_KEY])
        assert [w.address for w in wallets] == [TEST_ADDRESS]
        assert "Skipping key #1" in caplog.text
        assert "bogus-key" not in caplog.text

    def test_all_invalid(self):
        with pytest.raises(ConfigError, match="None of the loaded private keys"):
            load_wallets(["bad", "worse"])

    def test_empty(self):
        with pytest.raises(ConfigError):
            load_wallets([])
