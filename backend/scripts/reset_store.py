#!/usr/bin/env python3
"""
Store Reset Script

Inspects or reseeds the local TalentFlow store.

Usage:
    # Show collection sizes (seeds the store if it is empty or unreadable)
    python scripts/reset_store.py --show

    # Drop everything and reseed, reproducibly
    python scripts/reset_store.py --reset --seed 42

    # Use another database file
    python scripts/reset_store.py --database-url sqlite:///./data/demo.db --show
"""

import asyncio
import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Dict, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from talentflow.config import Settings, get_settings
from talentflow.database import ensure_sqlite_directory
from talentflow.services.store import DurableStore

logger = logging.getLogger(__name__)


async def reset_store(
    settings: Settings,
    reset: bool = False,
    seed: Optional[int] = None,
) -> Dict[str, int]:
    """
    Open the store, optionally wipe and reseed it, and count its contents.

    Returns:
        Number of entries per collection
    """
    ensure_sqlite_directory(settings.database_url)
    store = DurableStore.from_settings(settings, rng=random.Random(seed))

    try:
        await store.init()
        dataset = await store.reset() if reset else await store.load_dataset()
    finally:
        await store.close()

    return {
        "jobs": len(dataset.jobs),
        "candidates": len(dataset.candidates),
        "assessments": len(dataset.assessments),
    }


async def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect or reseed the TalentFlow store")
    parser.add_argument("--database-url", help="SQLAlchemy URL (defaults to settings)")
    parser.add_argument("--reset", action="store_true", help="Drop all collections and reseed")
    parser.add_argument("--seed", type=int, help="Random seed for generated data")
    parser.add_argument("--show", action="store_true", help="Print collection sizes")

    args = parser.parse_args()

    settings = get_settings()
    if args.database_url:
        settings = settings.model_copy(update={"database_url": args.database_url})

    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    counts = await reset_store(settings, reset=args.reset, seed=args.seed)

    if args.show or args.reset:
        for key, count in counts.items():
            logger.info(f"  {key}: {count}")


if __name__ == "__main__":
    asyncio.run(main())
