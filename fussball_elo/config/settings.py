"""
System-wide configuration settings for the Elo rating pipeline.
"""

# Elo rating parameters (defaults for EloConfig)
ELO_BASE_RATING = 1500.0
ELO_K_FACTOR = 32.0
ELO_HOME_ADVANTAGE = 75.0
ELO_GOAL_MARGIN_FACTOR = True
ELO_RATING_SCALE = 400.0

# Season break detection
SEASON_GAP_DAYS = 60  # Gap between consecutive matches that marks a new season
REVERSION_RATE = None  # Fraction pulled back to baseline at a season break (None = off)

# Daily snapshot window: 'team' (own first..last date) or 'global'
SNAPSHOT_WINDOW = 'team'

# Output artifacts
RATINGS_FILE = 'msi_ratings.json'
DAILY_FILE = 'msi_daily.json'
REGISTRY_FILE = 'teams_registry.json'
MATCHES_FILE = 'matches_all.json'
DEFAULT_OUTPUT_DIR = 'data'

# Raw source imports
CSV_ID_BASE = 1000000  # Keeps CSV-derived ids clear of API match ids
CSV_KICKOFF_TIME = '15:00:00'
CSV_ENCODING = 'latin-1'

# Logging
LOG_INTERVAL = 1000  # Log progress every N matches
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Validation
UNREALISTIC_GOALS = 15
TOP_N_OVERLAP = 10
