"""Allow ``python -m vspec``."""

from vspec.main import main

raise SystemExit(main())
