"""
ETF Insight

Ingests a portfolio's constituent weights and a historical price panel
from CSV, and derives per-holding latest prices and dollar sizes, a
time series of total portfolio value, and a top-N ranking by holding
size. Served over a small HTTP API and a command-line interface.
"""

__version__ = "0.1.0"
__author__ = "ETF Insight Team"
