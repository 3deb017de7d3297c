from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Make ``sequence_gate`` importable when this file is launched by path.

    Editors that "run the current file" start it without a package context,
    so the absolute import below needs the checkout root on ``sys.path``.
    """
    checkout_root = str(Path(__file__).resolve().parent.parent)
    if checkout_root not in sys.path:
        sys.path.insert(0, checkout_root)


try:
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    # No parent package: launched by file path.
    _ensure_repo_root_on_path()
    from sequence_gate.app import run  # type: ignore[attr-defined]


def main() -> int:
    """Open the gate window and block until it is closed."""
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
