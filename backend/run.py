"""
Run the MaintDesk admin API with uvicorn.

Usage:
    python run.py
    python run.py --reload          # Development mode with auto-reload
    python run.py --store memory    # In-process store, no MongoDB needed
    python run.py --port 8080       # Custom port
"""
import argparse
import os
import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the MaintDesk admin API server")
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )
    parser.add_argument(
        "--store",
        choices=["mongo", "memory"],
        default=None,
        help="Record store backend (default: STORE_BACKEND or mongo)"
    )

    args = parser.parse_args()

    # Settings are read on import, so the override has to land in the environment
    if args.store:
        os.environ["STORE_BACKEND"] = args.store

    print("Starting MaintDesk admin API server...")
    print(f"  Host: {args.host}")
    print(f"  Port: {args.port}")
    print(f"  Reload: {args.reload}")
    print(f"  Store: {os.environ.get('STORE_BACKEND', 'mongo')}")
    print()

    # Live views hold per-process subscriptions, so a single worker
    uvicorn.run(
        "maintdesk.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
