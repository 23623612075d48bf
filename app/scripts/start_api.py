"""
Run the API under uvicorn.

Usage:
    python -m app.scripts.start_api
"""
import os

import uvicorn


def _read_port() -> int:
    """Fetch and validate the PORT environment variable."""
    value = os.environ.get("PORT", "8000")
    try:
        return int(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid PORT '{value}': {exc}") from exc


def main() -> None:
    uvicorn.run(
        "app.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=_read_port(),
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
