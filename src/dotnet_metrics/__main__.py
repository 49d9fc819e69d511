"""
Main entry point when running as a module: python -m dotnet_metrics
"""

from __future__ import annotations

from .cli.app import main

if __name__ == "__main__":
    main()
