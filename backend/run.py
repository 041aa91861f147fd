"""
Social Hub API development server.

Usage (from backend/):
    python run.py                      # 127.0.0.1:8000
    python run.py --reload             # auto-reload on code changes
    python run.py --host 0.0.0.0 --port 9000

asyncpg needs a selector event loop, which uvicorn does not pick on Windows;
the loop factory is swapped before the server starts.
"""
import argparse
import sys

import uvicorn

from app.config import settings

if sys.platform == "win32":
    import asyncio

    import uvicorn.loops.asyncio as _uvicorn_loops

    def _selector_loop_factory(use_subprocess: bool = False):
        return asyncio.SelectorEventLoop

    _uvicorn_loops.asyncio_loop_factory = _selector_loop_factory


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Social Hub API")
    parser.add_argument("--reload", action="store_true", default=False)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default=settings.LOG_LEVEL.lower())
    args = parser.parse_args()

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        loop="asyncio",
    )


if __name__ == "__main__":
    main()
