from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # DynamoDB connection
    AWS_REGION: str = "us-east-1"
    DYNAMODB_ENDPOINT: Optional[str] = None
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""

    # PartiQL statement run once per entity, {{entity}} is replaced in the parameter
    LOOKUP_QUERY: str = 'SELECT * FROM "entities" WHERE "id" = ?'
    LOOKUP_QUERY_PARAMETER: str = "{{entity}}"
    LOOKUP_LIMIT: int = 10

    # Attribute specs, e.g. "Name:name, Created:date-iso:createdAt"
    SUMMARY_ATTRIBUTES: str = ""
    DETAIL_ATTRIBUTES: str = ""
    DOCUMENT_TITLE_ATTRIBUTE: str = ""

    MAX_CONCURRENT_QUERIES: int = 10
    MILLIS_AS_SECONDS: bool = True
    DISPLAY_TIMEZONE: str = "UTC"
    LOG_LEVEL: str = "INFO"

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create a single instance of the settings to use everywhere
settings = Settings()
