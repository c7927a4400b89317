"""
Codeur Prospection Bot.

Collects freelance project listings, tracks the ones worth pursuing as
prospects, and renders outreach messages from reusable templates.
"""

__version__ = "0.3.0"
