from __future__ import annotations

from mediasync.ui.cli import run

run()
