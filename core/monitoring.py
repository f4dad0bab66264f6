"""Console presentation for the check-in bot.

Renders the start-up banner, the interactive credential-source prompt and the
end-of-run summary table with Rich.  Per-step progress goes through
``logging``; this module only covers what is drawn directly on the terminal.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from checkin.workflow import WalletResult
from core.orchestrator import BatchSummary

BANNER_TITLE = "Super Intent Daily Check-in Bot"

# Prompt choice -> source key understood by main.load_private_key_source()
KEY_SOURCES = {
    "1": "pk",
    "2": "wallets",
}


class ConsoleUI:
    """Terminal output helpers bound to one Rich console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def banner(self) -> None:
        self.console.print(
            Panel(
                Text(BANNER_TITLE, style="bold cyan", justify="center"),
                box=box.HEAVY,
                border_style="cyan",
            )
        )

    def choose_key_source(self, pk_file: str, wallets_file: str) -> str:
        """Ask which credential file to load.

        Args:
            pk_file: Name shown for option 1.
            wallets_file: Name shown for option 2.

        Returns:
            ``"pk"`` or ``"wallets"``.
        """
        self.console.print()
        self.console.print("[cyan]Select private key source:[/cyan]")
        self.console.print(f"[white]1.[/white] Load from [magenta]{pk_file}[/magenta]")
        self.console.print(f"[white]2.[/white] Load from [magenta]{wallets_file}[/magenta]")
        self.console.print()
        choice = Prompt.ask(
            "[yellow][?] Enter your choice[/yellow]",
            choices=list(KEY_SOURCES),
            console=self.console,
        )
        return KEY_SOURCES[choice]

    def build_summary_table(self, summary: BatchSummary) -> Table:
        """Build a per-wallet results table.

        Args:
            summary: Result of :meth:`BatchOrchestrator.run`.

        Returns:
            Rich ``Table`` with one row per wallet.
        """
        table = Table(
            title="Check-in Summary",
            box=box.ROUNDED,
            show_lines=False,
        )
        table.add_column("#", justify="right", style="dim")
        table.add_column("Wallet", style="cyan")
        table.add_column("Proxy", style="magenta")
        table.add_column("Result")
        table.add_column("Granted", justify="right")
        table.add_column("Total Points", justify="right", style="green")
        table.add_column("Streak", justify="right")

        for i, result in enumerate(summary.results, start=1):
            table.add_row(
                str(i),
                result.address,
                result.proxy or "direct",
                self._outcome(result),
                str(result.points_granted),
                str(result.stats.total_points) if result.stats else "-",
                str(result.status.current_streak) if result.status else "-",
            )
        return table

    @staticmethod
    def _outcome(result: WalletResult) -> Text:
        if not result.succeeded:
            step = result.failed_step.value if result.failed_step else "unknown"
            return Text(f"failed at {step}", style="red")
        if result.already_checked_in:
            return Text("already done", style="yellow")
        return Text("checked in", style="green")

    def summary(self, summary: BatchSummary) -> None:
        self.console.print()
        self.console.print(self.build_summary_table(summary))
        color = "green" if summary.failed == 0 else "yellow"
        self.console.print(
            f"[{color}]{summary.succeeded}/{summary.total} wallet(s) "
            f"completed successfully.[/{color}]"
        )
