"""
Constants for BLK.

These constants are used by various modules for sensible defaults.
Several are also available via the config system.
"""

# Persistence
DEFAULT_STORAGE_KEY = "bookmarklethub_bookmarklets_v1"
DEFAULT_DATABASE = "blk.db"
DEFAULT_JSON_PATH = "blk.json"

# Bookmarklet form
JAVASCRIPT_PREFIX = "javascript:"
WRAPPER_HEAD = "javascript:(function(){try{\n"
WRAPPER_TAIL = "\n}catch(e){alert('Bookmarklet error: '+e);}})();"
UNTITLED_NAME = "Untitled"

# Sharing
DEFAULT_SHARE_BASE_URL = "https://localhost/"

# Export / import
EXPORT_FILENAME = "bookmarklets.json"
EXPORT_INDENT = 2

# Display limits
NAME_COLUMN_WIDTH = 40
DESCRIPTION_COLUMN_WIDTH = 60
