"""
NeuraNote desktop client.
Stages multi-page captures for AI analysis and browses the resulting notes by folder.
"""

__version__ = "1.0.0"
