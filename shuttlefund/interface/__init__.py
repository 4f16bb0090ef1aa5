"""Mini README: Interactive interfaces for Shuttlefund.

Exports the FastAPI application factory serving the ledger as JSON. The
command line entry point lives in ``main_fund_centre.py`` at the
repository root.
"""

from .web_app import create_application

__all__ = ["create_application"]
