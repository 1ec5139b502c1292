from __future__ import annotations

import asyncio

from pagewalk.app import run_app


def main() -> None:
    # All options come from the environment / .env (see pagewalk.config.Settings).
    asyncio.run(run_app())


if __name__ == "__main__":
    main()
