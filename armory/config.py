from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_name: str = "Armory Analytics"
    debug: bool = False
    api_version: str = "v1"

    # Dataset
    weapons_csv_path: str = "data/arc_raiders_final.csv"

    # Scoring defaults
    default_preset: str = "META"
    outlier_sigma_threshold: float = 1.5
    head_dep_high_percentile: float = 75.0

    # Validation summary
    missing_metric_warn_ratio: float = 0.3

    # Chart
    chart_row_limit: int = 15

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
