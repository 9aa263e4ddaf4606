"""Allow running as ``python -m viewforge``."""

from viewforge.cli import main

if __name__ == "__main__":
    main()
