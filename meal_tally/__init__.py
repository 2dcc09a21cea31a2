"""Monthly meal tally from attendance workbooks.

Reads attendance sheets (one row per person per day), resolves name spellings
to a single identity, aggregates meal counts and merges the result into an
existing report template workbook.
"""

__version__ = "0.1.0"
