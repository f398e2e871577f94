"""BrewFinder entrypoint.

Run with:
  python -m brewfinder
"""

import uvicorn

from brewfinder import config


def main() -> None:
    uvicorn.run("brewfinder.app:app", host=config.HOST, port=config.PORT, reload=config.RELOAD)


if __name__ == "__main__":
    main()
