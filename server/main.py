# =============================================================================
# VisualEyes Heatmap Client - Mock Server Entry Point
# =============================================================================
# CLI entry point for running the mock prediction server locally.  Point the
# client at it with VISUALEYES_API_URL=http://127.0.0.1:8000/predict/.
# =============================================================================

import argparse
import logging

import uvicorn

from config import get_config
from server.app import Account, create_app


def main():
    """Parse CLI arguments, apply overrides, and start the server."""
    parser = argparse.ArgumentParser(
        description="VisualEyes — mock prediction server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--host", type=str, default=None, help="Server bind address")
    parser.add_argument("--port", type=int, default=None, help="Server bind port")
    parser.add_argument(
        "--key", action="append", default=None,
        help="Accepted API key (repeatable; default: demo-key)",
    )
    parser.add_argument("--free", action="store_true", help="Keys are on the free plan")
    parser.add_argument("--quota", type=int, default=1000, help="Predictions per key")
    parser.add_argument("--echo", action="store_true", help="Echo uploaded images back")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = get_config()

    if args.host is not None:
        config.mock_host = args.host
    if args.port is not None:
        config.mock_port = args.port

    plan = "free" if args.free else "pro"
    keys = args.key or ["demo-key"]
    accounts = {key: Account(plan=plan, quota=args.quota) for key in keys}

    print("\n" + "=" * 60)
    print("  VisualEyes — Mock Prediction Server")
    print("=" * 60)
    print(f"  Keys       : {', '.join(keys)} ({plan}, quota {args.quota})")
    print(f"  Echo mode  : {args.echo}")
    print(f"  Endpoint   : {config.mock_url}/predict/")
    print("=" * 60 + "\n")

    uvicorn.run(
        create_app(accounts=accounts, echo=args.echo),
        host=config.mock_host,
        port=config.mock_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
