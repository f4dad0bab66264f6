import re
from datetime import datetime, timedelta, timezone

import pytest
from siwe import SiweMessage

from checkin.siwe import service_message, utc_timestamp
from core.config import BotSettings

from conftest import TEST_ADDRESS

STATEMENT = (
    "To securely sign in, please sign this message to verify "
    "you're the owner of this wallet."
)
ISSUED_AT = "2024-05-01T08:30:00.123Z"


def test_utc_timestamp_format():
    moment = datetime(2024, 5, 1, 8, 30, 0, 123456, tzinfo=timezone.utc)
    assert utc_timestamp(moment) == ISSUED_AT


def test_utc_timestamp_converts_offsets():
    moment = datetime(2024, 5, 1, 10, 30, 0, tzinfo=timezone(timedelta(hours=2)))
    assert utc_timestamp(moment) == "2024-05-01T08:30:00.000Z"


def test_utc_timestamp_now_shape():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_timestamp())


class TestServiceMessage:
    """Challenge built for the check-in service."""

    def test_fields_come_from_settings(self):
        message = service_message(
            BotSettings(_env_file=None), TEST_ADDRESS, "abc123xyz", issued_at=ISSUED_AT,
        )
        assert isinstance(message, SiweMessage)
        assert message.domain == "mission.superintent.ai"
        assert message.statement == STATEMENT
        assert message.chain_id == 1
        assert message.nonce == "abc123xyz"

    def test_canonical_layout_with_statement(self):
        message = service_message(
            BotSettings(_env_file=None), TEST_ADDRESS, "abc123xyz", issued_at=ISSUED_AT,
        )
        lines = message.prepare_message().split("\n")

        assert lines[0] == "mission.superintent.ai wants you to sign in with your Ethereum account:"
        assert lines[1] == TEST_ADDRESS
        assert lines[2] == ""
        assert lines[3] == STATEMENT
        assert lines[4] == ""
        assert lines[5].startswith("URI: https://mission.superintent.ai")
        assert lines[6:] == [
            "Version: 1",
            "Chain ID: 1",
            "Nonce: abc123xyz",
            f"Issued At: {ISSUED_AT}",
        ]

    def test_layout_without_statement(self):
        settings = BotSettings(siwe_statement="", siwe_chain_id=10, _env_file=None)
        message = service_message(settings, TEST_ADDRESS, "abc123xyz", issued_at=ISSUED_AT)
        text = message.prepare_message()

        assert message.statement is None
        assert text.startswith(
            "mission.superintent.ai wants you to sign in with your Ethereum account:\n"
            f"{TEST_ADDRESS}\n\n\nURI: "
        )
        assert "\nChain ID: 10\n" in text

    def test_stamps_issued_at(self):
        message = service_message(BotSettings(_env_file=None), TEST_ADDRESS, "abc123xyz")
        assert str(message.issued_at).endswith("Z")

    def test_invalid_address_rejected(self):
        with pytest.raises(ValueError):
            service_message(BotSettings(_env_file=None), "not-an-address", "abc123xyz")
