"""Run the Padayon backend under Uvicorn."""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
  host = os.getenv("PADAYON_SERVER_HOST", "0.0.0.0")
  port = int(os.getenv("PADAYON_SERVER_PORT", "8000"))
  reload = os.getenv("UVICORN_RELOAD", "false").lower() == "true"
  uvicorn.run("padayon.main:app", host=host, port=port, reload=reload, log_level=os.getenv("LOG_LEVEL", "info"))


if __name__ == "__main__":
  main()
