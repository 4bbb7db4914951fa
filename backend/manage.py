#!/usr/bin/env python
"""Django's command-line utility for administrative tasks."""
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def main():
    """Run administrative tasks."""
    # backend/.env first (Docker), then the repository root (local dev)
    current_dir = Path(__file__).resolve().parent
    if (current_dir / ".env").exists():
        load_dotenv(current_dir / ".env")
    else:
        load_dotenv(current_dir.parent / ".env")

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "portal_backend.settings")
    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
