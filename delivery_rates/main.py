"""Composition root for the delivery rates system.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here.

Module Structure:
- Configuration loading via config module
- Adapter instantiation (event store, seed data, reporter)
- Core service initialization
- Entry point selection (report or interactive CLI)
"""

import asyncio
import json
import logging
import sys
from typing import Any

from delivery_rates.adapters.cli.commands import CLICommandHandler
from delivery_rates.adapters.report.stdout import StdoutRateReporter
from delivery_rates.adapters.store.memory import InMemoryDeliveryEventStore
from delivery_rates.adapters.store.seed import load_seed_events
from delivery_rates.config import load_settings
from delivery_rates.core.delivery_service import DeliveryService
from delivery_rates.core.errors import DeliveryRatesError
from delivery_rates.core.rates import get_policy


async def _run_cli_interactive(cli_handler: CLICommandHandler) -> None:
    """Run interactive CLI loop.

    Args:
        cli_handler: CLICommandHandler instance for executing commands.
    """
    logger = logging.getLogger(__name__)
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    loop = asyncio.get_running_loop()

    while True:
        try:
            command_line = await loop.run_in_executor(None, input, "rates> ")
            command_line = command_line.strip()

            if not command_line:
                continue

            if command_line.lower() == "exit":
                logger.info("Exiting CLI")
                break

            if command_line.lower() == "help":
                _print_cli_help()
                continue

            parts = command_line.split(maxsplit=1)
            command = parts[0].lower()
            args_str = parts[1] if len(parts) > 1 else ""

            try:
                args = json.loads(args_str) if args_str else {}
            except json.JSONDecodeError:
                logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
                continue

            try:
                result = await _execute_cli_command(cli_handler, command, args)
                print(json.dumps(result, indent=2, default=str))
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                logger.error(f"Command execution error: {e}")
                print(json.dumps({"status": "error", "message": str(e)}, indent=2))

        except EOFError:
            logger.info("EOF received, exiting CLI")
            break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            continue


async def _execute_cli_command(
    cli_handler: CLICommandHandler,
    command: str,
    args: dict[str, Any],
) -> dict[str, Any]:
    """Execute a CLI command.

    Raises:
        ValueError: If command is not recognized, arguments are not a JSON
            object or a parameter is missing.
    """
    if not isinstance(args, dict):
        raise ValueError(
            f"Arguments must be a JSON object, got {type(args).__name__}"
        )

    if command == "list":
        return await cli_handler.list_events(output_format=args.get("format", "json"))

    elif command == "list_by":
        _require(args, "order_id", "delivery_id")
        return await cli_handler.list_events_by(
            int(args["order_id"]), int(args["delivery_id"])
        )

    elif command == "create":
        return await cli_handler.create_event(args)

    elif command == "update":
        _require(args, "order_id", "delivery_id", "event")
        return await cli_handler.update_event(
            int(args["order_id"]), int(args["delivery_id"]), args["event"]
        )

    elif command == "rates":
        return await cli_handler.calculate_rates(
            policy=args.get("policy"),
            output_format=args.get("format", "json"),
        )

    elif command == "rate":
        _require(args, "order_id", "delivery_id")
        return await cli_handler.rate_for(
            int(args["order_id"]), int(args["delivery_id"]), policy=args.get("policy")
        )

    elif command == "summary":
        return await cli_handler.billing_summary(policy=args.get("policy"))

    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")


def _require(args: dict[str, Any], *names: str) -> None:
    for name in names:
        if name not in args:
            raise ValueError(f"Missing required parameter: {name}")


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  list
    List all recorded events.
    Example: list {"format": "text"}

  list_by
    List the events of one delivery.
    Required: order_id, delivery_id
    Example: list_by {"order_id": 1, "delivery_id": 1}

  create
    Record a new event.
    Example: create {"order_id": 1, "delivery_id": 3, "kind": "Entrega",
                     "status": "PENDING", "timestamp": "2025-09-06T15:16:00Z"}

  update
    Replace the first event of a delivery.
    Required: order_id, delivery_id, event
    Example: update {"order_id": 1, "delivery_id": 3, "event": {...}}

  rates
    Calculate rates for all deliveries.
    Optional: policy (lenient, strict), format (json, text)
    Example: rates {"policy": "strict"}

  rate
    Calculate the rate of one delivery.
    Required: order_id, delivery_id
    Optional: policy
    Example: rate {"order_id": 1, "delivery_id": 1}

  summary
    Totals over all delivery rates.
    Optional: policy

  help
    Show this help message.

  exit
    Exit the CLI.
    """
    print(help_text)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )


async def bootstrap() -> None:
    """Load configuration, wire adapters, and start the application.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate the event store, seeded from file if configured
    4. Initialize the delivery service
    5. Select and start run mode
    """
    settings = load_settings()

    configure_logging(settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info("Loading delivery rates system...")

    seed_events = []
    if settings.seed_events_path:
        seed_events = load_seed_events(settings.seed_events_path)
    store = InMemoryDeliveryEventStore(seed_events)
    logger.info(f"Event store initialized with {await store.count()} events")

    service = DeliveryService(store=store, policy=get_policy(settings.rate_policy))
    logger.info(f"Rate policy: {settings.rate_policy}")

    logger.info(f"Starting in {settings.run_mode} mode...")

    if settings.run_mode == "report":
        reporter = StdoutRateReporter(
            currency=settings.currency_symbol, verbose=settings.debug
        )
        await reporter.report(await service.list_events(), await service.rates())

    elif settings.run_mode == "cli":
        await _run_cli_interactive(CLICommandHandler(service))

    else:
        logger.error(f"Unknown run mode: {settings.run_mode}")
        sys.exit(1)


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Invalid input data or fatal runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except DeliveryRatesError as e:
        logger.error(f"Invalid delivery data: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
