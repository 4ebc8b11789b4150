"""State/store layer.

This package owns the nested state object and the delete-aware merge that
folds queued data into it.
"""
