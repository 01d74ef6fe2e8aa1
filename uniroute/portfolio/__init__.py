"""Wallet liquidity positions.

Module structure:
- scanner.py: PortfolioScanner finding supplied pairs and valuing positions
"""

from uniroute.portfolio.scanner import PortfolioScanner

__all__ = ["PortfolioScanner"]
