"""Constants for the Forem challenge collector."""

# Forem (dev.to) API
FOREM_API_BASE_URL = "https://dev.to/api"
FOREM_API_ARTICLES_PATH = "/articles"
DEFAULT_PER_PAGE = 30

# Pause between page requests and between tags in a batch update
DEFAULT_PAGE_DELAY_SECONDS = 0.1
DEFAULT_TAG_DELAY_SECONDS = 2.0

# Every genuine challenge submission carries this tag
MARKER_TAG = "devchallenge"

# Too broad to fetch directly; specific challenge tags are required
RESERVED_BROAD_TAG = "devchallenge"

# Fetchable tags must end with this suffix
CHALLENGE_TAG_SUFFIX = "challenge"

# Organization username whose marker-tagged posts are announcements
ANNOUNCEMENT_ORGANIZATION = "devteam"

COMPONENT_COLLECTOR = "collector"
