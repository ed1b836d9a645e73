"""
Main entrypoint of the calculator client.

This script:
- Reads settings from the environment and the command line
- Probes the calculation API health endpoint
- Serves the browser calculator UI

The calculation API itself is an external service and must already be running
for calculations to succeed; the UI starts either way.
"""

import argparse
from typing import List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from calcapi_client.client.client import CalculationClient
from calcapi_client.common.config import ClientSettings, LogLevel
from calcapi_client.common.logger import configure_logging, logger
from calcapi_client.engine.calculator import Calculator
from calcapi_client.ui.gradio_ui import launch_ui


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Flags left out stay None so the environment or the defaults apply.

    Attributes
    ----------
    base_url : str, optional
        Base URL of the calculation API.
    timeout : float, optional
        HTTP timeout in seconds.
    host : str, optional
        Address the UI binds to.
    port : int, optional
        Port the UI listens on.
    log_level : LogLevel, optional
        Logging level.
    health_check : bool
        Whether to probe the API before serving the UI.
    """

    base_url: Optional[str] = None
    timeout: Optional[float] = None
    host: Optional[str] = None
    port: Optional[int] = None
    log_level: Optional[LogLevel] = None
    health_check: bool = True


def parse_args(argv: Optional[List[str]] = None) -> Tuple[CliArgs, ClientSettings]:
    """
    Parse and validate command-line arguments, then merge them into the settings.

    Invalid flags and invalid merged settings both end with a usage error.

    :param list argv: Arguments to parse (defaults to sys.argv[1:])

    :return: Validated CLI arguments and settings
    :rtype: Tuple[CliArgs, ClientSettings]
    """
    parser = argparse.ArgumentParser(
        description="Browser calculator backed by a remote calculation API"
    )
    parser.add_argument("--base-url", help="Base URL of the calculation API (env: CALCAPI_BASE_URL)")
    parser.add_argument("--timeout", help="HTTP timeout in seconds (env: CALCAPI_TIMEOUT)")
    parser.add_argument("--host", help="Address the UI binds to (env: CALCAPI_UI_HOST)")
    parser.add_argument("--port", help="Port the UI listens on (env: CALCAPI_UI_PORT)")
    parser.add_argument(
        "--log-level",
        help="Logging level: DEBUG, INFO, WARNING or ERROR (env: CALCAPI_LOG_LEVEL, default INFO)",
    )
    parser.add_argument(
        "--no-health-check",
        dest="health_check",
        action="store_false",
        help="Do not probe the API health endpoint at startup",
    )

    args = parser.parse_args(argv)

    try:
        cli_args = CliArgs(
            base_url=args.base_url,
            timeout=args.timeout,
            host=args.host,
            port=args.port,
            log_level=args.log_level.upper() if args.log_level else None,
            health_check=args.health_check,
        )
        return cli_args, build_settings(cli_args)
    except ValidationError as exc:
        parser.error(str(exc))


def build_settings(cli_args: CliArgs) -> ClientSettings:
    """
    Merge CLI arguments over environment variables and defaults.

    :param CliArgs cli_args: Validated CLI arguments

    :return: Validated settings
    :rtype: ClientSettings
    :raises pydantic.ValidationError: If the merged values are invalid
    """
    return ClientSettings.from_env(
        base_url=cli_args.base_url,
        timeout=cli_args.timeout,
        host=cli_args.host,
        port=cli_args.port,
        log_level=cli_args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """
    Start the calculator UI.
    """
    cli_args, settings = parse_args(argv)
    configure_logging(settings.log_level)

    client = CalculationClient.from_settings(settings)
    if cli_args.health_check and not client.check_health():
        logger.warning(f"📡❌ Calculation API at {settings.api_root} is not reachable, calculations will fail")

    calculator = Calculator(client=client, history_size=settings.history_size)
    launch_ui(settings, calculator)


if __name__ == "__main__":
    main()
