DOMAIN = "f1_explorer"

DEFAULT_BASE_URL = "http://localhost:8080/api/"

# Per-request timeout of the HTTP transport, seconds
DEFAULT_REQUEST_TIMEOUT = 10

# Seasons published by the statistics backend
MIN_YEAR = 1950
MAX_YEAR = 2024
DEFAULT_YEAR = 2024
DEFAULT_ROUND = 2

CONF_BASE_URL = "base_url"
CONF_REQUEST_TIMEOUT = "request_timeout"
CONF_MIN_YEAR = "min_year"
CONF_MAX_YEAR = "max_year"
CONF_DEFAULT_YEAR = "default_year"
CONF_USER_AGENT = "user_agent"

# Resource kinds
KIND_SCHEDULE = "schedule"
KIND_CONSTRUCTORS = "constructors"
KIND_CIRCUITS = "circuits"
KIND_QUALIFYING_RESULT = "qualifying_result"
KIND_RACE_RESULT = "race_result"
KIND_RECENT_POSTS = "recent_posts"

# Backend endpoints (POST, JSON body)
SCHEDULE_ENDPOINT = "getSchedule"
CONSTRUCTORS_ENDPOINT = "getConstructors"
CIRCUITS_ENDPOINT = "getCircuits"
QUALIFYING_RESULT_ENDPOINT = "getQualifyingResult"
RACE_RESULT_ENDPOINT = "getRaceResult"
RECENT_POSTS_ENDPOINT = "get-recent-posts"

FEED_INITIAL_PAGE = 0

MSG_GENERIC_ERROR = "Something went wrong. Please try again later."
MSG_INVALID_YEAR_URL = "Invalid Year specified in URL."
MSG_INVALID_YEAR_ROUND_URL = "Invalid Year or Round specified in URL."
MSG_POSTS_UNAVAILABLE = "Uh oh! Couldn't fetch posts."
MSG_YEAR_RANGE = "Year must be between {min_year} & {max_year}"
