import uvicorn

from fitlead.core.settings import settings


def main() -> None:
    uvicorn.run("fitlead.main:app", host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
