"""
Language construct headings for source buffers, layered over the outline engine.

No imports from `foldmark.outline.commands` or `foldmark.outline.visibility`, which
build on this package.
"""
