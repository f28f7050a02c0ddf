"""
Entry point for running dbcontest as a module.

Usage:
    python -m dbcontest
    python -m dbcontest --server 10.0.0.5 --user app
"""

from dbcontest.cli.main import app

if __name__ == "__main__":
    app(prog_name="dbcontest")
