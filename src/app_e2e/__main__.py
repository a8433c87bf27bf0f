"""Entry point for running app-e2e as a module.

Usage:
    python -m app_e2e run
    python -m app_e2e run --suite login --headed
    python -m app_e2e seed
"""

from app_e2e.cli import main

if __name__ == "__main__":
    main()
