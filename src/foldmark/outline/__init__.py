"""
Line-oriented outline engine: standard headlines, levels, folding and
structural edits.
"""
