"""
Root conftest.py: makes the backend modules (database, icons, shortcut_sync,
...) importable as top-level names during test collection.
"""
import os
import sys

backend_dir = os.path.dirname(os.path.abspath(__file__))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)
