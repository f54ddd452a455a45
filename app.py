from __future__ import annotations

from onboarding.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
