"""Run the screening service with uvicorn."""

import os

import uvicorn


def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3003"))
    uvicorn.run("screening.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
