"""Allow ``python -m prme``."""

from .cli import main

raise SystemExit(main())
