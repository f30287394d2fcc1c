"""Allow running as python -m kvscope."""

from kvscope.cli.main import app

app()
