from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Identifier disambiguation
    LABEL_WINDOW: int = 5  # Lines scanned from an "Ext Color" label line
    LEADING_SECTION_LINES: int = 30  # Vehicle identification block before comparables

    # Header-then-value line scans
    HEADER_SCAN_WINDOW: int = 5

    # Cross-field validation
    MIN_MODEL_YEAR: int = 1900
    MAX_MODEL_YEAR: int = 2028  # Latest plausible model year
    MAX_PLAUSIBLE_MILEAGE: int = 999999
    LOW_CONFIDENCE_THRESHOLD: int = 20

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
