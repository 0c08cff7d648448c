"""
Icons Module

Icon resolution for container shortcuts:
- IconOverrideTable: curated name -> URL mappings loaded at startup
- IconResolver: override-first lookup against the dashboard-icons catalog
- HttpExistenceChecker: HEAD-based validation of catalog URLs
"""

from icons.overrides import IconOverrideTable
from icons.existence import HttpExistenceChecker
from icons.resolver import IconResolver, IconValidationFailure, icon_lookup_key

__all__ = [
    'IconOverrideTable',
    'HttpExistenceChecker',
    'IconResolver',
    'IconValidationFailure',
    'icon_lookup_key',
]
