from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

import uvicorn


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="combate-server",
        description="Run the build simulator HTTP API.",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--catalog", default="", help="Override the skills catalog path.")
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args(argv)

    logging.basicConfig(level=str(args.log_level).upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.catalog:
        os.environ["COMBATE_CATALOG_PATH"] = str(Path(args.catalog).expanduser().resolve())

    # Import after env setup so the API picks up the catalog override.
    from combate.api import app as api_app

    print(f"Combate API listening on http://{args.host}:{args.port}")
    uvicorn.run(api_app, host=args.host, port=args.port, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
