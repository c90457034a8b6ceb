"""Convenience launcher for the podviz dashboard from a source checkout."""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> int:
    src_dir = Path(__file__).resolve().parents[1] / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))
    try:
        import textual  # noqa: F401  pylint: disable=unused-import

        from podviz.cli.app import main as podviz_main
    except ModuleNotFoundError as exc:
        missing = exc.name or "dependency"
        print(
            f"Dashboard dependency '{missing}' is missing. Install with pip install -e .",
            file=sys.stderr,
        )
        return 2

    return podviz_main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
