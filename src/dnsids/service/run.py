from __future__ import annotations

import argparse

import uvicorn

from dnsids.config import DEFAULT_SERVICE_HOST, DEFAULT_SERVICE_PORT
from dnsids.logging_utils import configure_logging


def serve(host: str = DEFAULT_SERVICE_HOST, port: int = DEFAULT_SERVICE_PORT) -> None:
    uvicorn.run("dnsids.service.api:app", host=host, port=port, reload=False)


def main() -> None:
    configure_logging()
    parser = argparse.ArgumentParser(description="Run the DNS IDS analysis service")
    parser.add_argument("--host", default=DEFAULT_SERVICE_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_SERVICE_PORT)
    args = parser.parse_args()
    serve(args.host, args.port)


if __name__ == "__main__":
    main()
