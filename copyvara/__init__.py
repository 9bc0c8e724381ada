"""
Copyvara - personal knowledge capture with lexical retrieval.

Pasted text is structured by a language model into summaries, tags and
action plans, stored, and answered against with evidence-grounded replies.
"""

__version__ = "0.3.0"
