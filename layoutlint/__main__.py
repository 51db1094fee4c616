"""Allow ``python -m layoutlint``."""

from layoutlint.cli import main

raise SystemExit(main())
