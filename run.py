#!/usr/bin/env python3
"""Startup script for the uploader companion API."""
import argparse
import subprocess
import sys


def main():
    """Start the FastAPI backend server."""
    parser = argparse.ArgumentParser(description="Run the uploader companion API")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    print(f"Starting backend server on http://{args.host}:{args.port}")
    print(f"   API docs: http://{args.host}:{args.port}/docs")
    print("\n   Press CTRL+C to stop the server\n")

    command = [
        sys.executable, "-m", "uvicorn",
        "api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        command.append("--reload")

    try:
        return subprocess.run(command).returncode
    except KeyboardInterrupt:
        print("\nShutting down...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
