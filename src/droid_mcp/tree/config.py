# Query match weights, strictly ordered so visible text dominates identifiers
TEXT_MATCH_SCORE = 100
DESCRIPTION_MATCH_SCORE = 80
HINT_MATCH_SCORE = 60
VIEW_ID_MATCH_SCORE = 40

# Actionability bonuses, only awarded on top of a textual match
EDITABLE_BONUS = 15
CLICKABLE_BONUS = 10
ENABLED_BONUS = 5

ROOT_PATH = "r"
PATH_SEPARATOR = "/"

DEFAULT_SNAPSHOT_MAX_NODES = 300
