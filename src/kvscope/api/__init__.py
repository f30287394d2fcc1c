"""HTTP API for kvscope."""
