"""Allow ``python -m smart_logger``."""

from .cli import main

raise SystemExit(main())
