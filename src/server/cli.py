"""Command line entry point: `tictactoe-relay`"""

from typing import Optional

import click

from src.core.config import LOG_LEVELS, RelaySettings
from src.core.exceptions import ConfigurationError
from src.core.logging_config import setup_logging
from src.server.listener import PairingServer


@click.command()
@click.option("--host", default=None, help="Interface to listen on. [env: RELAY_HOST]")
@click.option("--port", type=int, default=None, help="TCP port, 0 picks a free one. [env: RELAY_PORT]")
@click.option(
    "--turn-timeout",
    type=float,
    default=None,
    help="Seconds a player may take to send a message before the session is ended. [env: RELAY_TURN_TIMEOUT]",
)
@click.option(
    "--authoritative-board/--trust-snapshots",
    default=None,
    help="Keep a server-side board and reject snapshots that do not follow from it. [env: RELAY_AUTHORITATIVE_BOARD]",
)
@click.option(
    "--notify/--no-notify",
    "notify_on_termination",
    default=None,
    help="Tell the remaining player when a session ends because of the other one. [env: RELAY_NOTIFY_ON_TERMINATION]",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="[env: RELAY_LOG_LEVEL]",
)
def main(
    host: Optional[str],
    port: Optional[int],
    turn_timeout: Optional[float],
    authoritative_board: Optional[bool],
    notify_on_termination: Optional[bool],
    log_level: Optional[str],
) -> None:
    """Relay server for two-player tic-tac-toe: pairs connecting players and checks every move."""
    try:
        settings = RelaySettings.from_env().override(
            host=host,
            port=port,
            turn_timeout=turn_timeout,
            authoritative_board=authoritative_board,
            notify_on_termination=notify_on_termination,
            log_level=log_level,
        )
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    setup_logging(settings.log_level)
    server = PairingServer(settings)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        click.echo("Shutting down.")
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
