from __future__ import annotations

from formengine.cli import cli

if __name__ == "__main__":
    cli()
