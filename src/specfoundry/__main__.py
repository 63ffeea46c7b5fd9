"""Allow ``python -m specfoundry``."""

from __future__ import annotations

from specfoundry.cli import app

if __name__ == "__main__":  # pragma: no cover - manual execution entrypoint
    app(prog_name="specfoundry")
