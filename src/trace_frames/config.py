# config.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dotenv import load_dotenv
load_dotenv()

class Settings(BaseSettings):
    # Store type configuration
    STORE_TYPE: str = Field(
        default="opensearch",
        description="Type of search backend holding the spans: opensearch or elasticsearch"
    )

    # OpenSearch settings
    OS_HOST: str = "localhost:9200"
    OS_USERNAME: str = "admin"
    OS_PASSWORD: str = "admin"

    # Elasticsearch settings
    ES_HOST: str = "http://localhost:9200"
    ES_USERNAME: str = "elastic"
    ES_PASSWORD: str = "password"

    # Span index written by Data Prepper
    TRACE_INDEX_PATTERN: str = Field(
        default="otel-v1-apm-span-*",
        description="Index pattern searched by both trace queries"
    )

    # Datasource identity used by the trace list drill-down link
    DATASOURCE_UID: str = ""
    DATASOURCE_NAME: str = "OpenSearch"

    #Logging settings
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(extra="allow", env_file=".env")


settings = Settings()
