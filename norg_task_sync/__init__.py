"""
norg-task-sync - keep Neorg todos and Google Tasks in step.
"""

__version__ = "0.1.0"
