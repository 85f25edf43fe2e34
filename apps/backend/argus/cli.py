from __future__ import annotations

import argparse
import json
import signal
import sys
import threading
import webbrowser

import uvicorn

from argus.main import ArgusState, create_app
from argus.storage.usage import get_storage_usage, usage_percent

_KNOWN_COMMANDS = {"serve", "sweep", "usage"}


def _url_for_browser(bind: str, port: int) -> str:
    host = "127.0.0.1" if bind == "0.0.0.0" else bind
    return f"http://{host}:{port}"


def _add_serve_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--data-dir", default=None, help="Path for runtime data (SQLite/logs/config)")
    parser.add_argument("--bind", default="127.0.0.1", help="Bind host (default 127.0.0.1)")
    parser.add_argument("--port", type=int, default=9002, help="Bind port (default 9002)")
    parser.add_argument("--no-open", action="store_true", help="Do not auto-open browser")
    parser.add_argument("--log-level", default="info", help="Log level")


def _build_parser(prog: str) -> argparse.ArgumentParser:
    """Parser used when no explicit command is given; serves the API."""
    parser = argparse.ArgumentParser(prog=prog, description="Argus Vision local camera dashboard backend")
    _add_serve_arguments(parser)
    return parser


def _build_command_parser(prog: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Argus Vision local camera dashboard backend")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the Argus API server")
    _add_serve_arguments(serve)

    sweep = subparsers.add_parser("sweep", help="Apply the recording retention policy once")
    sweep.add_argument("--data-dir", default=None, help="Path for runtime data")
    sweep.add_argument("--log-level", default="warning", help="Log level")

    usage = subparsers.add_parser("usage", help="Print the estimated storage usage")
    usage.add_argument("--data-dir", default=None, help="Path for runtime data")
    usage.add_argument("--log-level", default="warning", help="Log level")

    return parser


def _run(parsed: argparse.Namespace, force_open: bool | None = None) -> int:
    should_open = not parsed.no_open if force_open is None else force_open
    if parsed.bind == "0.0.0.0":
        print("[warning] LAN access enabled. Keep Argus on trusted networks and do not expose publicly.")

    app = create_app(
        data_dir=parsed.data_dir,
        bind=parsed.bind,
        port=parsed.port,
        log_level=parsed.log_level,
    )
    url = _url_for_browser(parsed.bind, parsed.port)
    browser_timer: threading.Timer | None = None

    if should_open:
        browser_timer = threading.Timer(0.9, lambda: webbrowser.open(url))
        browser_timer.start()

    print(f"Argus running at {url}")
    config = uvicorn.Config(
        app,
        host=parsed.bind,
        port=parsed.port,
        log_level=parsed.log_level,
        workers=1,
        timeout_graceful_shutdown=2,
    )
    server = uvicorn.Server(config)
    previous_handlers: dict[int, object] = {}
    run_exit_code: int | None = None

    def _shutdown_state() -> None:
        argus_state = getattr(getattr(app, "state", None), "argus", None)
        if argus_state is not None:
            argus_state.shutdown()

    def _request_exit(signum: int, _frame: object) -> None:
        if signum in {signal.SIGINT, signal.SIGTERM}:
            server.should_exit = True

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            previous_handlers[sig] = signal.getsignal(sig)
            signal.signal(sig, _request_exit)
        except (AttributeError, ValueError):
            continue

    try:
        try:
            server.run()
        except KeyboardInterrupt:
            server.should_exit = True
        except SystemExit as exc:
            if server.should_exit:
                run_exit_code = 0
            else:
                code = exc.code
                run_exit_code = code if isinstance(code, int) else 1
    finally:
        _shutdown_state()
        if browser_timer is not None:
            browser_timer.cancel()
            browser_timer.join(timeout=0.5)
        for sig, handler in previous_handlers.items():
            try:
                signal.signal(sig, handler)
            except (AttributeError, ValueError):
                continue
    if run_exit_code is not None:
        return run_exit_code
    if bool(getattr(server, "started", False)) or server.should_exit:
        return 0
    return 1


def _print_result(result: object) -> None:
    print(json.dumps(result, indent=2, sort_keys=True))


def _run_maintenance(parsed: argparse.Namespace) -> int:
    state = ArgusState.create(
        data_dir=parsed.data_dir, log_level=parsed.log_level, sweep=False, persist_overrides=False
    )
    try:
        if parsed.command == "sweep":
            _print_result(state.retention_service.apply().as_dict())
        else:
            usage = get_storage_usage(state.store)
            limit_mb = state.settings_store.settings.storage_limit_mb
            _print_result(
                {
                    "bytes": usage.bytes,
                    "formatted": usage.formatted,
                    "percent_of_limit": usage_percent(usage, limit_mb),
                }
            )
    finally:
        state.shutdown()
    return 0


def _dispatch_command(parsed: argparse.Namespace) -> int:
    if parsed.command == "serve":
        return _run(parsed)
    if parsed.command in {"sweep", "usage"}:
        return _run_maintenance(parsed)
    raise ValueError(f"Unknown command: {parsed.command}")


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        if args and args[0] in _KNOWN_COMMANDS:
            parser = _build_command_parser("argus")
            parsed = parser.parse_args(args)
            return _dispatch_command(parsed)
        parser = _build_parser("argus")
        parsed = parser.parse_args(args)
        return _run(parsed)
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        print(f"[error] {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
