"""
Legal Request Router Backend

Routes legal requests to the right staff member using admin-defined rules,
with an LLM used only to extract structured request fields.
"""

__version__ = "1.0.0"
