"""
Centralized path configuration for DockDash
Ensures all modules use consistent, volume-mounted paths
"""

import os

# Bundled icon override table, installed as package data of the icons package
from icons.overrides import BUNDLED_MAPPINGS_FILE as DEFAULT_ICON_MAPPINGS_FILE

# Base paths - these MUST use absolute paths to the volume mount
# The /app/data directory is mounted as a volume in Docker
DATA_DIR = os.getenv('DOCKDASH_DATA_DIR', '/app/data')

# For development/testing outside Docker
if not os.path.exists('/app') and 'DOCKDASH_DATA_DIR' not in os.environ:
    # Running locally, use relative paths
    DATA_DIR = './data'

# Database path - MUST be in the volume mount for persistence
DATABASE_PATH = os.getenv('DOCKDASH_DATABASE_PATH', os.path.join(DATA_DIR, 'dashboard.db'))
DATABASE_URL = f'sqlite:///{DATABASE_PATH}'

LOG_DIR = os.path.join(DATA_DIR, 'logs')


def ensure_data_dirs():
    """Create data directories if they don't exist"""
    for directory in [DATA_DIR, LOG_DIR]:
        os.makedirs(directory, exist_ok=True)
        try:
            os.chmod(directory, 0o700)
        except OSError:
            pass  # May not have permission in some environments
