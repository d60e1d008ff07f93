"""Utility functions for assetbook."""

from assetbook.utils.date_parser import parse_date
from assetbook.utils.amount_parser import parse_amount, to_amount
from assetbook.utils.similarity import similarity

__all__ = ["parse_date", "parse_amount", "to_amount", "similarity"]
