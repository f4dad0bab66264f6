from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console

import main
from core.exceptions import ConfigError
from core.monitoring import ConsoleUI
from core.orchestrator import BatchSummary

from conftest import TEST_ADDRESS, TEST_PRIVATE_KEY


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PK_FILE", str(tmp_path / "pk.txt"))
    monkeypatch.setenv("WALLETS_FILE", str(tmp_path / "wallets.json"))
    monkeypatch.setenv("PROXIES_FILE", str(tmp_path / "proxies.txt"))
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "bot.log"))
    return tmp_path


@pytest.fixture
def ui():
    return ConsoleUI(Console(record=True, width=200, color_system=None))


def test_parse_args():
    args = main.parse_args(["--source", "wallets", "--no-proxy", "--log-level", "DEBUG"])
    assert args.source == "wallets"
    assert args.no_proxy is True
    assert args.log_level == "DEBUG"


def test_unknown_key_source(workdir):
    with pytest.raises(ConfigError):
        main.load_private_key_source("vault", main.BotSettings())


class TestMain:

    @patch("main.setup_logging")
    @patch("main.BatchOrchestrator")
    async def test_runs_batch(self, orch_cls, mock_logging, workdir, ui):
        (workdir / "pk.txt").write_text(TEST_PRIVATE_KEY + "\n", encoding="utf-8")
        (workdir / "proxies.txt").write_text("1.1.1.1:80\n", encoding="utf-8")
        orch_cls.return_value.run = AsyncMock(return_value=BatchSummary())

        code = await main.main(["--source", "pk"], ui=ui)

        assert code == 0
        wallets = orch_cls.return_value.run.call_args.args[0]
        assert [w.address for w in wallets] == [TEST_ADDRESS]
        manager = orch_cls.call_args.kwargs["proxy_manager"]
        assert [p.url for p in manager.proxies] == ["http://1.1.1.1:80"]
        mock_logging.assert_called_once()

    @patch("main.setup_logging")
    @patch("main.BatchOrchestrator")
    async def test_no_proxy_flag(self, orch_cls, mock_logging, workdir, ui):
        (workdir / "pk.txt").write_text(TEST_PRIVATE_KEY + "\n", encoding="utf-8")
        (workdir / "proxies.txt").write_text("1.1.1.1:80\n", encoding="utf-8")
        orch_cls.return_value.run = AsyncMock(return_value=BatchSummary())

        await main.main(["--source", "pk", "--no-proxy"], ui=ui)

        assert orch_cls.call_args.kwargs["proxy_manager"].proxies == []

    @patch("main.setup_logging")
    @patch("main.BatchOrchestrator")
    async def test_prompt_selects_wallets_json(self, orch_cls, mock_logging, workdir, ui):
        (workdir / "wallets.json").write_text(
            f'[{{"privateKey": "{TEST_PRIVATE_KEY}"}}]', encoding="utf-8",
        )
        orch_cls.return_value.run = AsyncMock(return_value=BatchSummary())

        with patch("core.monitoring.Prompt.ask", return_value="2"):
            code = await main.main([], ui=ui)

        assert code == 0
        assert orch_cls.return_value.run.call_args.args[0][0].address == TEST_ADDRESS

    @patch("main.setup_logging")
    @patch("main.BatchOrchestrator")
    async def test_missing_keys_is_fatal(self, orch_cls, mock_logging, workdir, ui):
        code = await main.main(["--source", "pk"], ui=ui)
        assert code == 1
        orch_cls.assert_not_called()

    @patch("main.setup_logging")
    @patch("main.BatchOrchestrator")
    async def test_invalid_settings_are_fatal(self, orch_cls, mock_logging, workdir, ui, monkeypatch):
        monkeypatch.setenv("STEP_DELAY_MIN", "5")
        monkeypatch.setenv("STEP_DELAY_MAX", "1")
        code = await main.main(["--source", "pk"], ui=ui)
        assert code == 1
        mock_logging.assert_not_called()
        orch_cls.assert_not_called()
