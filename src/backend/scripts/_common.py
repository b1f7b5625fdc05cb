"""
Common utilities for backend scripts.

This module sets up the Python path for script execution and provides
shared helpers. Import this module at the top of any script that needs
to import from the backend package.

Usage:
    from scripts._common import run_with_context

    async def main(context): ...
    run_with_context(main)
"""

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable

# Add backend root to path for imports
# This allows scripts to be run directly (python scripts/foo.py)
# without needing to be run as modules (python -m scripts.foo)
BACKEND_ROOT = Path(__file__).parent.parent
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from core.context import AppContext, create_cosmos_context  # noqa: E402
from core.errors import LiveVoteError  # noqa: E402
from db.cosmos_session import close_cosmos  # noqa: E402


def run_with_context(main: Callable[[AppContext], Awaitable[int]]) -> None:
    """Run ``main`` against a Cosmos-backed context and exit with its status."""

    async def runner() -> int:
        try:
            return await main(create_cosmos_context())
        except LiveVoteError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        finally:
            await close_cosmos()

    sys.exit(asyncio.run(runner()))
