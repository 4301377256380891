"""Run the Contentify issuer with uvicorn: ``python -m app``."""
import uvicorn

from app.config import SERVICE_PORT


def main() -> None:
    uvicorn.run("app.main:app", host="0.0.0.0", port=SERVICE_PORT)


if __name__ == "__main__":
    main()
