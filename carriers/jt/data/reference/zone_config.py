"""
Zone Configuration

Cities are matched against zones.csv by exact name after trimming
whitespace. There is no fuzzy matching: two spellings of the same
governorate are two different keys.

Any city that is not listed falls through to DEFAULT_ZONE, the remote
tier, which must exist in base_rates.csv.
"""

DEFAULT_ZONE = "remote"
