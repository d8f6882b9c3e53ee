from enum import Enum


class Location(str, Enum):
    AMERICAS = "Americas"
    AMSTERDAM = "Amsterdam"
    HYDERABAD = "Hyderabad"


class ScoreKind(str, Enum):
    LIKERT = "likert"  # Strongly Disagree .. Strongly Agree
    CATEGORICAL = "categorical"  # Named levels mapped onto integers
    BOOLEAN = "boolean"  # Yes/no question, reported as a percentage


class ScoreModelName(str, Enum):
    LIKERT_5 = "likert_5"
    AI_TOOLS = "ai_tools"


class SchemaVersion(str, Enum):
    TEAM_NAME = "team_name"  # Legacy: evaluations referenced teams by name
    TEAM_ID = "team_id"


class StoreBackend(str, Enum):
    SUPABASE = "supabase"
    MEMORY = "memory"
