"""CLI entry point for luo-gateway."""

import sys
import time
from datetime import datetime

from rich.console import Console

from core.backend_store import FileBackendStore
from core.config import CONFIG_FILE, Config, get_app_data_dir, load_config
from core.exceptions import ConfigurationError
from ui.log_utils import CLI_LOG_FILE, clear_logs, configure_logging, write_cli_log

console = Console()


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = sys.argv[1:] if argv is None else argv
    config = load_config()

    if args:
        arg = args[0]

        if arg in ("--help", "-h"):
            _print_help()
            return 0

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Backend:[/bold] {config.backend_config_path()}")
            console.print(f"[bold]Embedded data:[/bold] {get_app_data_dir(config.embedded)}")
            console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
            return 0

        if arg == "--get-backend":
            console.print(_store(config).read())
            return 0

        if arg == "--set-backend":
            return _set_backend(config, args[1] if len(args) > 1 else "")

        if arg == "--embedded":
            return _run_embedded(config)

        if arg == "--dev":
            if len(args) < 2:
                console.print("[red][ERROR][/red] --dev requires MODULE:APP")
                return 2
            return _run_dev(config, args[1])

        console.print(f"[red][ERROR][/red] Unknown option: {arg}")
        _print_help()
        return 2

    return _run_standalone(config)


def _store(config: Config) -> FileBackendStore:
    return FileBackendStore(
        config.backend_config_path(),
        default_url=config.backend.default_url,
        env_var=config.backend.env_var,
    )


def _set_backend(config: Config, url: str) -> int:
    store = _store(config)
    try:
        stored = store.write(url)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        return 1
    if not store.persisted:
        console.print(f"[yellow]Warning:[/yellow] could not write {store.path}")
        return 1
    console.print(f"[green]Backend set:[/green] {stored}")
    return 0


def _run_standalone(config: Config) -> int:
    from adapters.standalone import run
    from ui.console_logger import ConsoleLogger
    from ui.dashboard import Dashboard

    clear_logs()
    store = _store(config)

    if config.ui.dashboard:
        request_logger = Dashboard(config, backend_url=store.read)
        request_logger.start()
    else:
        configure_logging()
        request_logger = ConsoleLogger()

    start_time = datetime.now()
    write_cli_log("STARTUP", "Gateway started", port=config.server.port, backend=store.read())
    try:
        run(config, request_logger, store)
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Gateway stopped", duration=str(duration))
        if isinstance(request_logger, Dashboard):
            request_logger.stop()
    return 0


def _run_embedded(config: Config) -> int:
    from adapters.embedded import EmbeddedServer
    from ui.console_logger import ConsoleLogger

    configure_logging()
    server = EmbeddedServer(config, ConsoleLogger())
    try:
        url = server.start()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        return 1

    console.print(f"[bold cyan]Embedded gateway[/bold cyan] {url} -> {server.store.read()}")
    write_cli_log("STARTUP", "Embedded gateway started", url=url)
    try:
        while server.is_running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
        write_cli_log("SHUTDOWN", "Embedded gateway stopped")
    return 0


def _run_dev(config: Config, import_string: str) -> int:
    from adapters.dev import run_dev
    from ui.console_logger import ConsoleLogger

    configure_logging()
    try:
        run_dev(import_string, config, ConsoleLogger())
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        return 1
    return 0


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Luo Gateway[/bold cyan]

Serves the web UI and forwards /api/* and /health to a backend that can be
switched at runtime through /config/backend.

[bold]Usage:[/bold]
    luo-gateway                      Start standalone server with live dashboard
    luo-gateway --embedded           Start embedded server on the fixed local port
    luo-gateway --dev MODULE:APP     Wrap an ASGI dev app with the gateway
    luo-gateway --get-backend        Print the active backend origin
    luo-gateway --set-backend URL    Change the backend origin
    luo-gateway --config             Show config locations
    luo-gateway --help               Show this help

[bold]Environment:[/bold]
    BACKEND_URL    Backend origin used until one is saved
    PORT           Standalone server port
"""
    console.print(help_text)


if __name__ == "__main__":
    sys.exit(main())
