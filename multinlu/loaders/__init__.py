"""
Corpus loaders for bulk-populating an NLU manager.
"""

from .excel_reader import ExcelReader

__all__ = ["ExcelReader"]
