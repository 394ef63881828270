"""
Entry point for CLI module execution.
Allows running: python -m app.cli <command>
"""
import sys

from app.cli.prompts import main

if __name__ == '__main__':
    sys.exit(main())
