import json
import logging
import os
from typing import Any, List, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from core.exceptions import ConfigError

logger = logging.getLogger(__name__)


class Wallet:
    """
    An EVM address paired with its message-signing capability.
    The private key stays inside the wrapped eth_account signer and is
    never exposed through attributes, repr or logs.
    """

    __slots__ = ("_account",)

    def __init__(self, account: LocalAccount):
        self._account = account

    @classmethod
    def from_private_key(cls, private_key: str) -> "Wallet":
        """
        Build a wallet from a hex private key (with or without ``0x``).

        Raises:
            ConfigError: If the key is not a valid secp256k1 private key.
        """
        key = (private_key or "").strip()
        if key and not key.startswith("0x"):
            key = "0x" + key
        try:
            account = Account.from_key(key)
        except Exception as e:
            # Deliberately omit the key material from the message
            raise ConfigError(f"Invalid private key: {type(e).__name__}") from None
        return cls(account)

    @property
    def address(self) -> str:
        """EIP-55 checksummed address."""
        return self._account.address

    def sign_message(self, message: str) -> str:
        """Sign *message* with EIP-191 personal_sign and return 0x-hex."""
        signed = self._account.sign_message(encode_defunct(text=message))
        signature = signed.signature.hex()
        return signature if signature.startswith("0x") else "0x" + signature

    def __repr__(self) -> str:
        return f"Wallet(address={self.address!r})"


def _read_lines(file_path: str) -> List[str]:
    with open(file_path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def load_private_keys(file_path: str, log: Optional[logging.Logger] = None) -> List[str]:
    """
    Load private keys from a text file, one per line.
    Blank lines and ``#`` comments are skipped.

    Raises:
        ConfigError: If the file cannot be read or holds no keys.
    """
    log = log or logger
    if not os.path.exists(file_path):
        raise ConfigError(f"Failed to read {file_path}: file not found")
    try:
        lines = _read_lines(file_path)
    except OSError as e:
        raise ConfigError(f"Failed to read {file_path}: {e}") from e

    keys = [
        line.strip() for line in lines
        if line.strip() and not line.strip().startswith("#")
    ]
    if not keys:
        raise ConfigError(f"No private keys found in {file_path}")

    log.info(f"Loaded {len(keys)} private key(s) from {file_path}")
    return keys


def load_wallets_json(file_path: str, log: Optional[logging.Logger] = None) -> List[str]:
    """
    Load private keys from a JSON array of ``{"privateKey": ...}`` objects.
    Entries without a key are skipped.

    Raises:
        ConfigError: If the file is missing, malformed, empty, or no entry
            carries a private key.
    """
    log = log or logger
    if not os.path.exists(file_path):
        raise ConfigError(f"Failed to read {file_path}: file not found")
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data: Any = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read {file_path}: {e}") from e

    if not isinstance(data, list) or not data:
        raise ConfigError(f"No wallets found in {file_path}")

    keys = [
        str(entry["privateKey"]).strip() for entry in data
        if isinstance(entry, dict) and entry.get("privateKey")
    ]
    if not keys:
        raise ConfigError(f"No valid private keys found in {file_path}")

    log.info(f"Loaded {len(keys)} private key(s) from {file_path}")
    return keys


def load_wallets(private_keys: List[str], log: Optional[logging.Logger] = None) -> List[Wallet]:
    """
    Convert private keys into wallets, preserving order.
    An invalid key is logged by its 1-based position (never its value) and
    skipped so the remaining wallets still run.

    Raises:
        ConfigError: If no key yields a usable wallet.
    """
    log = log or logger
    if not private_keys:
        raise ConfigError("No private keys to load")

    wallets = []
    for i, key in enumerate(private_keys, start=1):
        try:
            wallets.append(Wallet.from_private_key(key))
        except ConfigError as e:
            log.error(f"❌ Skipping key #{i}: {e}")
    if not wallets:
        raise ConfigError("None of the loaded private keys are valid")
    return wallets
