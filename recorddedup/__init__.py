"""
Fuzzy duplicate detection for tabular records.
"""
