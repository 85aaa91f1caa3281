"""
Marketplace Reports

Reporting and analytics backend for the fashion marketplace admin dashboard.
"""

__version__ = "1.0.0"
