"""
EntroScan Collectors
=====================

Target sources feeding the classifier: a live directory-tree walk and
the PID-busting process enumerator.
"""

from entroscan.collectors.file_walker import walk_regular_files
from entroscan.collectors.process_enum import ProcessEnumerator

__all__ = ["ProcessEnumerator", "walk_regular_files"]
