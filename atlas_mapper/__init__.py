"""Atlas coordinate mapper.

Turns historical atlas index exports (bilingual headers, DMS coordinate
notation) into validated decimal-degree point records for a map/table view.
"""

__version__ = "0.1.0"
