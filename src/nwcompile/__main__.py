"""Allow running nwcompile as ``python -m nwcompile``."""

from nwcompile.cli import main

if __name__ == "__main__":
    main()
