from __future__ import annotations

DBLP_HOST = "dblp.uni-trier.de"
DBLP_PERSON_BASE = f"https://{DBLP_HOST}/pid"

# Starting author for a run when no seed is given on the command line
DEFAULT_SEED_PID = "47/8013"

DEFAULT_OUT_DIR = "output"
DEFAULT_OUTPUT_FILE = "collaborators.csv"
DEFAULT_LOG_FILE = "run.log"

# Traversal bounds
# seed page is depth 0, its collaborators depth 1, theirs depth 2;
# links found on a depth-2 page are not followed
MAX_DEPTH = 2

# Number of pages fetched at the same time; DBLP throttles aggressive clients
PARALLELISM = 2

# Fixed wait before every fetch, in seconds
REQUEST_DELAY = 0.0

# Upper bound of the random jitter added on top of REQUEST_DELAY, in seconds
RANDOM_DELAY = 5.0

# Fetch each profile URL at most once per run
ALLOW_URL_REVISIT = False

# XPath-like selectors over a DBLP person XML record
NAME_SELECTOR = "/dblpperson/@name"
PID_SELECTOR = "/dblpperson/@pid"
# every publication kind (<article>, <inproceedings>, <book>, ...) lists its authors the same way
COLLABORATOR_SELECTOR = "//dblpperson/r/*/author/@pid"

# CSV output
CSV_FIELDNAMES = ["name", "id", "collaborators"]
COLLABORATOR_SEPARATOR = ","

# HTTP request configuration
# Default timeout for HTTP requests (in seconds)
HTTP_TIMEOUT_DEFAULT = 20.0

# Exponential backoff configuration for the transport's retries
HTTP_BACKOFF_INITIAL = 0.5  # Initial backoff delay in seconds
HTTP_MAX_RETRIES = 2        # Maximum number of retry attempts

# HTTP status codes that should trigger retries
HTTP_RETRY_STATUS_CODES = (408, 429, 500, 502, 503, 504)
