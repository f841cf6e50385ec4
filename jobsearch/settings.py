from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DB_URL: str = "sqlite:///./jobs.db"
    LOG_LEVEL: str = "INFO"
    USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0 Safari/537.36 UnifiedJobSearch/0.1"
    )

    # Credentials for the paid / registered APIs
    SEARCHAPI_KEY: Optional[str] = None
    USAJOBS_API_KEY: Optional[str] = None
    USAJOBS_EMAIL: Optional[str] = None
    ADZUNA_APP_ID: Optional[str] = None
    ADZUNA_APP_KEY: Optional[str] = None
    ADZUNA_COUNTRY: str = "us"
    RAPIDAPI_KEY: Optional[str] = None

    # Timeouts (seconds)
    BOARD_TIMEOUT: float = 3.0
    WORKDAY_TIMEOUT: float = 5.0
    USAJOBS_TIMEOUT: float = 10.0
    API_TIMEOUT: float = 15.0
    GOOGLE_PAGE_TIMEOUT: float = 30.0
    GOOGLE_TOTAL_TIMEOUT: float = 60.0
    GOOGLE_MAX_PAGES: int = 5
    GOOGLE_RESULTS_PER_PAGE: int = 100

    # Vault match scoring
    SCORE_TITLE_WEIGHT: int = 50
    SCORE_SKILL_WEIGHT: int = 5
    SCORE_SKILL_CAP: int = 40
    SCORE_FRESH_WEIGHT: int = 10
    SCORE_FRESH_DAYS: int = 7

    # Company boards per ATS. Override with a JSON list in the environment.
    GREENHOUSE_BOARDS: list[str] = [
    # tech
    "openai", "anthropic", "stripe", "figma", "notion", "linear", "vercel", "cloudflare",
    "databricks", "scale", "rippling", "meta", "shopify", "gitlab", "twilio", "salesforce",
    "zoom", "slack", "dropbox", "atlassian",
    # oil & gas
    "shell", "chevron", "halliburton", "slb", "baker-hughes", "weatherford", "conocophillips",
    "exxonmobil", "totalenergies", "bp", "equinor", "eni", "occidental",
    # engineering
    "aecom", "bechtel", "fluor", "jacobs", "kbr", "worley", "wood",
    # energy
    "nextera", "duke-energy", "southern-company", "dominion", "exelon",
    ]
    LEVER_BOARDS: list[str] = [
    "netflix", "shopify", "stripe", "squarespace", "grammarly", "canva",
    "reddit", "discord", "figma", "miro", "airtable", "monday",
    ]
    WORKDAY_BOARDS: list[dict[str, str]] = [
    {"tenant": "shell", "site": "Shell_Careers", "wd": "3"},
    {"tenant": "bp", "site": "bpCareers", "wd": "3"},
    {"tenant": "chevron", "site": "jobs", "wd": "5"},
    {"tenant": "conocophillips", "site": "ConocoPhillips", "wd": "1"},
    {"tenant": "halliburton", "site": "Halliburton", "wd": "5"},
    {"tenant": "slb", "site": "SLB", "wd": "1"},
    {"tenant": "bakerhughes", "site": "BakerHughes", "wd": "5"},
    ]
    RECRUITEE_BOARDS: list[str] = [
    "gitlab", "miro", "personio", "contentful", "adjust",
    "blacklane", "deliveryhero", "soundcloud", "n26", "wolt",
    "gorillas", "tier", "flixbus", "celonis", "commercetools",
    "helpling", "orderbird", "wooga", "channable", "bynder",
    ]
    WORKABLE_BOARDS: list[str] = [
    "beat", "blueground", "epignosis", "workable", "taxibeat",
    "centaur", "pollfish", "zerogrey", "instacar", "skroutz",
    "plum", "spotawheel", "cardlink", "citrix", "instashop",
    "viva", "persado", "cognitiv", "upstream", "althaus",
    "hellas-direct", "funky-buddha", "efood", "wolt", "glovo",
    "box", "deliveryhero", "revolut", "transferwise", "tide",
    ]
    ASHBY_BOARDS: list[str] = [
    "notion", "linear", "ramp", "watershed", "vanta", "merge", "hex",
    ]


settings = Settings()
