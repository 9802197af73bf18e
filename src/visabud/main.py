"""VisaBud entry point."""

import asyncio
import logging

from dotenv import find_dotenv, load_dotenv

from .cli import run_cli


def main() -> None:
    """Main entry point."""
    load_dotenv(find_dotenv(usecwd=True))
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    asyncio.run(run_cli())


if __name__ == "__main__":
    main()
