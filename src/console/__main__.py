"""``python -m src.console`` entry-point."""

from src.console.cli import main

raise SystemExit(main())
