"""Module entry point for the ss3 bucket explorer."""
import sys

from .app import main

if __name__ == "__main__":
    sys.exit(main())
