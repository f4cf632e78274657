"""
Run SmartPay Server

Starts the checkout API under uvicorn. Host and port default to the
SMARTPAY_HOST / SMARTPAY_PORT settings; flags override them per run.
"""

import argparse

import uvicorn
from smartpay.config import settings


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Serve the SmartPay checkout API.")
    p.add_argument("--host", default=settings.host, help="Bind address")
    p.add_argument("--port", type=int, default=settings.port, help="Bind port")
    p.add_argument("--reload", action="store_true", help="Restart on source changes (development)")
    p.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    return p.parse_args(argv)


def main(argv=None):
    """Start the SmartPay API."""
    args = parse_args(argv)

    print(f"🌐 SmartPay API on http://{args.host}:{args.port} (docs at /docs)")
    if args.reload:
        print("♻️  Auto-reload enabled")

    uvicorn.run(
        "smartpay.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
