import uvicorn

from watchlist_bridge.core.config import settings


def main() -> None:
    uvicorn.run("watchlist_bridge.main:app", host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
