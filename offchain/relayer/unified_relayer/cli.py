"""
CLI entry point for the Unified Deposit Relayer.
"""

import asyncio
from pathlib import Path
from typing import Optional

import structlog
import typer
import uvicorn

from .config import MonitorConfig, Settings

app = typer.Typer(
    name="unified-relayer",
    help="Unified Deposit Relayer - relays USDC deposits to the unified contract recipient",
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


def _load_settings(config_path: Optional[Path]) -> Settings:
    return Settings(_env_file=config_path) if config_path else Settings()


@app.command()
def run(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to .env configuration file",
    ),
    host: Optional[str] = typer.Option(None, "--host", help="HTTP listen host"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="HTTP listen port"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
) -> None:
    """
    Start the chain monitors and the /health endpoint.
    """
    from .api import create_app

    settings = _load_settings(config_path)
    configure_logging(json_logs or settings.log_json)

    if host is not None:
        settings.backend_host = host
    if port is not None:
        settings.backend_port = port

    config = MonitorConfig.from_settings(settings)

    if not config.has_credentials:
        typer.echo("Warning: UNIFIED_ADDRESS or RELAYER_PRIVATE_KEY not set - no chain will be monitored.")
    elif not config.configured_chains:
        typer.echo("Warning: no RPC URL configured - no chain will be monitored.")

    typer.echo(f"Unified Deposit Relayer running on port {config.port}")

    # Failing to bind the listener is the one error that ends the process
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level="info")


@app.command()
def status(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to .env configuration file",
    ),
) -> None:
    """
    Show the contract recipient and relayer whitelist status per chain.
    """
    from .evm import UnifiedContractClient

    settings = _load_settings(config_path)
    configure_logging(settings.log_json)
    config = MonitorConfig.from_settings(settings)

    chains = config.monitorable_chains()
    if not chains:
        typer.echo("No chain is monitorable with the current configuration.")
        raise typer.Exit(code=1)

    async def _status() -> None:
        for chain in chains:
            client = UnifiedContractClient(chain, config.relayer_private_key, config.unified_address)
            typer.echo(f"[{chain.name}] chain id {chain.chain_id}")
            typer.echo(f"  Relayer: {client.address}")
            try:
                typer.echo(f"  Recipient: {await client.get_recipient()}")
                whitelisted = await client.is_whitelisted()
                typer.echo(f"  Whitelisted: {'yes' if whitelisted else 'no'}")
            except Exception as e:
                typer.echo(f"  Error: {e}")

    asyncio.run(_status())


@app.command()
def version() -> None:
    """Show the relayer version."""
    from unified_relayer import __version__
    typer.echo(f"unified-relayer v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
