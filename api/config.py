import os
from dotenv import load_dotenv

load_dotenv()

TMDB_API_KEY = os.getenv("TMDB_API_KEY", "")
OMDB_API_KEY = os.getenv("OMDB_API_KEY", "")
STATE_FILE = os.getenv("STATE_FILE", os.path.join("data", "appData.json"))
MATCH_TTL_HOURS = float(os.getenv("MATCH_TTL_HOURS", "48"))
FEED_SIZE = int(os.getenv("FEED_SIZE", "10"))
UPSTREAM_PAGE_COUNT = int(
    os.getenv("UPSTREAM_PAGE_COUNT", "500")
)  # TMDB caps /movie/popular at 500 pages of ~20 items
CATALOG_TIMEOUT = float(os.getenv("CATALOG_TIMEOUT", "10"))
CATALOG_CONCURRENCY = int(os.getenv("CATALOG_CONCURRENCY", "5"))
STREAMING_REGION = os.getenv("STREAMING_REGION", "US")
ENRICHMENT_CACHE_TTL = int(os.getenv("ENRICHMENT_CACHE_TTL", "3600"))
