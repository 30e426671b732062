"""
Dynamic Report Builder - user-defined fields over a tabular dataset.

Lets a user augment a fixed dataset with raw and calculated fields
(date difference, arithmetic, concatenation), preview the resulting
table and export it as CSV, XLSX or PDF.
"""

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = ["__version__"]
