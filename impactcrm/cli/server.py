"""ImpactCRM server control script.

Usage:
    impactcrm-server start [--port PORT] [--reload] [--foreground]
    impactcrm-server stop
    impactcrm-server status
"""

import argparse
import json
import os
import signal
import subprocess
import sys
import time
import urllib.error
import urllib.request
from pathlib import Path

from impactcrm.config import settings

APP_PATH = "impactcrm.main:app"


def pid_file() -> Path:
    return settings.data_dir / "impactcrm.pid"


def log_file() -> Path:
    return settings.data_dir / "impactcrm.log"


def get_pid() -> int | None:
    """PID of the running server, clearing a stale PID file."""
    path = pid_file()
    if not path.exists():
        return None
    try:
        pid = int(path.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        path.unlink(missing_ok=True)
        return None


def start_server(
    port: int,
    host: str,
    reload: bool = False,
    foreground: bool = False,
) -> bool:
    """Start uvicorn, detached unless ``foreground`` is set.

    Returns:
        True if the server started.
    """
    pid = get_pid()
    if pid:
        print(f"Server is already running (PID: {pid})")
        return False

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    cmd = [sys.executable, "-m", "uvicorn", APP_PATH, "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")
    else:
        cmd += ["--workers", str(settings.workers)]

    print(f"Starting ImpactCRM on http://{host}:{port}")

    if foreground:
        try:
            subprocess.run(cmd)
        except KeyboardInterrupt:
            print("\nServer stopped")
        return True

    with open(log_file(), "w") as log:
        process = subprocess.Popen(
            cmd,
            stdout=log,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )

    time.sleep(1)
    if process.poll() is not None:
        print(f"Failed to start server. See {log_file()}")
        return False

    pid_file().write_text(str(process.pid))
    print(f"Server started with PID: {process.pid}")
    return True


def stop_server() -> bool:
    """Stop the server with SIGTERM, escalating to SIGKILL after 5 seconds."""
    pid = get_pid()
    if not pid:
        print("Server is not running")
        return False

    print(f"Stopping server (PID: {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)
        for _ in range(10):
            time.sleep(0.5)
            try:
                os.kill(pid, 0)
            except ProcessLookupError:
                break
        else:
            print("Server didn't stop gracefully, forcing...")
            os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        print("Server was not running")
    except PermissionError:
        print(f"Permission denied to stop process {pid}")
        return False

    pid_file().unlink(missing_ok=True)
    print("Server stopped")
    return True


def server_status(port: int) -> bool:
    """Print whether the server is running and what /health reports."""
    pid = get_pid()
    if not pid:
        print("ImpactCRM server is not running")
        return False

    print(f"ImpactCRM server is running (PID: {pid})")
    try:
        with urllib.request.urlopen(f"http://localhost:{port}/health", timeout=2) as response:
            data = json.loads(response.read().decode())
        print(f"  Status: {data.get('status', 'unknown')}")
        print(f"  Version: {data.get('version', 'unknown')}")
        print(f"  Record types: {', '.join(data.get('record_types', []))}")
    except (urllib.error.URLError, TimeoutError, ValueError):
        print("  (Could not fetch health status)")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ImpactCRM server control script")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    start_parser = subparsers.add_parser("start", help="Start the server")
    start_parser.add_argument("--port", "-p", type=int, default=None, help="Port to bind to")
    start_parser.add_argument("--host", default=None, help="Host to bind to")
    start_parser.add_argument("--reload", "-r", action="store_true", help="Enable auto-reload")
    start_parser.add_argument(
        "--foreground", "-f", action="store_true", help="Run in foreground (blocking)"
    )

    subparsers.add_parser("stop", help="Stop the server")

    status_parser = subparsers.add_parser("status", help="Check server status")
    status_parser.add_argument("--port", "-p", type=int, default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "start":
            ok = start_server(
                port=args.port or settings.port,
                host=args.host or settings.host,
                reload=args.reload,
                foreground=args.foreground,
            )
        elif args.command == "stop":
            ok = stop_server()
        else:
            ok = server_status(args.port or settings.port)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
