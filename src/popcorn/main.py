"""
Main entry point for Popcorn Catcher.

Wires settings, the leaderboard store, the asset cache and the game
window together and runs the window's async loop.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from popcorn.config.settings import Settings, get_settings
from popcorn.leaderboard.store import DocumentStore, InMemoryStore, JsonBinStore
from popcorn.leaderboard.sync import LeaderboardSync


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure logging to the console and, optionally, a log file."""
    level = logging.DEBUG if debug else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=handlers,
    )


def create_store(settings: Settings) -> DocumentStore:
    """Remote store when a bin is configured, in-memory board otherwise."""
    logger = logging.getLogger(__name__)
    board = settings.leaderboard
    if board.is_configured:
        logger.info(f"Using JSONBin leaderboard {board.bin_id}")
        return JsonBinStore(
            bin_id=board.bin_id,
            master_key=board.master_key,
            base_url=board.base_url,
            timeout=board.timeout,
        )

    logger.warning("No JSONBin configured, scores are kept in memory only")
    return InMemoryStore()


async def run_game(settings: Settings) -> None:
    """Run the game window until it is closed."""
    from popcorn.graphics.assets import AssetCache
    from popcorn.simulator.window import GameWindow, WindowConfig
    from popcorn.utils.profile import PlayerProfile, list_skins

    store = create_store(settings)
    leaderboard = LeaderboardSync.from_settings(store, settings.leaderboard)

    display = settings.display
    config = WindowConfig(
        width=display.width,
        height=display.height,
        fps=display.fps,
        pixel_ratio=display.pixel_ratio,
    )

    window = GameWindow(
        leaderboard=leaderboard,
        assets=AssetCache(settings.skins_path),
        skins=list_skins(settings.skins_path),
        profile=PlayerProfile.load(settings.profile_path),
        profile_path=settings.profile_path,
        config=config,
    )

    try:
        await window.run()
    finally:
        await store.close()


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug, settings.log_file)

    logger = logging.getLogger(__name__)
    logger.info("Popcorn Catcher starting...")

    try:
        asyncio.run(run_game(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("Popcorn Catcher stopped")


if __name__ == "__main__":
    main()
