"""
CLI for the unified contract bootstrap.
"""

from pathlib import Path
from typing import Optional

import structlog
import typer

from .bootstrap import BootstrapRunner
from .config import BootstrapSettings
from .delegation import DelegatedExecutionClient
from .errors import BootstrapError

app = typer.Typer(
    name="unified-bootstrap",
    help="EIP-7702 bootstrap of the unified contract (setRecipient, setRelayer, relayETH)",
    add_completion=False,
)


def configure_logging(json_logs: bool = False) -> None:
    """Configure structlog for console or JSON output."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
        ]
    )


@app.command()
def run(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to .env configuration file",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Check ownership and print calldata without sending",
    ),
    step_delay: Optional[float] = typer.Option(
        None,
        "--step-delay",
        help="Seconds to pause after setRecipient and setRelayer (default 15)",
    ),
    no_wait: bool = typer.Option(
        False,
        "--no-wait",
        help="Do not poll for receipts, rely on the fixed pauses only",
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
) -> None:
    """
    Configure the unified contract from its owner account.
    """
    settings = BootstrapSettings.load(config_path)
    configure_logging(json_logs or settings.log_json)

    if step_delay is not None:
        settings.step_delay_seconds = step_delay
    if no_wait:
        settings.wait_for_receipt = False

    try:
        settings.require()

        client = DelegatedExecutionClient(
            rpc_url=settings.sepolia_rpc_url or "",
            private_key=settings.private_key or "",
            contract_address=settings.contract_address or "",
            gas_limit=settings.gas_limit,
        )
        runner = BootstrapRunner(settings, client)

        typer.echo("=== EIP-7702 bootstrap ===")
        typer.echo(f"EOA: {client.address}")
        typer.echo(f"Delegated Contract: {client.contract_address}")

        if dry_run:
            for name, calldata in runner.plan():
                typer.echo(f"{name}: {calldata}")
            return

        result = runner.run()
    except BootstrapError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error occurred during transaction: {e}", err=True)
        raise typer.Exit(code=1)

    for name, tx_hash in result.tx_hashes.items():
        typer.echo(f"✓ {name}: {runner.explorer_link(tx_hash) or tx_hash}")


@app.command()
def version() -> None:
    """Show the bootstrap version."""
    from unified_bootstrap import __version__
    typer.echo(f"unified-bootstrap v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
