"""Constants for the tag store."""

INDEX_FILENAME = "tags.json"
REFRESH_FILENAME = ".refresh"
ANNOUNCEMENTS_SUFFIX = "-announcements"

# Files copied by publish()
PUBLISHED_PATTERNS = ("*.json", REFRESH_FILENAME)

COMPONENT_STORE = "store"
