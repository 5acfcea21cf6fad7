"""
EntroScan Module Entry Point
=============================

Allows running the EntroScan CLI via: python -m entroscan
"""

from entroscan.cli import main

if __name__ == "__main__":
    main()
