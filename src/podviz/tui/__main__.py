"""Launch the podviz dashboard with ``python -m podviz.tui``."""

from __future__ import annotations

from podviz.cli.app import console_main

if __name__ == "__main__":
    console_main()
