"""
Request values, status classification, outcomes and the JSON codec.
"""
