"""Unsigned transaction construction for swaps, liquidity and approvals."""

from uniroute.transactions.builder import TransactionBuilder

__all__ = ["TransactionBuilder"]
