"""
Norg document handling: parsing, editing and file discovery.
"""

from .document import NorgDocument
from .files import get_files_from_folders, is_norg_file
from .parser import parse_norg

__all__ = ['NorgDocument', 'get_files_from_folders', 'is_norg_file', 'parse_norg']
