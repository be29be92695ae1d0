"""
Configuration - Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed application configuration using:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- Missing required fields raise a validation error at import time.
- `extra="ignore"`: unknown env vars are ignored (not an error).

Policy knobs
------------
Case limits and AI context budgets are plain settings so deployments can tune
them without code changes:

- CASE_MAX_DOCUMENTS / CASE_MAX_TOTAL_BYTES : per-case attachment limits
- CONTEXT_PER_DOCUMENT_CHARS / CONTEXT_MAX_CHARS : prompt context budgets
- EXTRACTED_TEXT_MAX_CHARS : cap applied to cached file extraction results
- AI_TEMPERATURE / AI_MAX_OUTPUT_TOKENS : completion call parameters

Usage
-----
from casedesk.database.config.config import settings

max_docs = settings.CASE_MAX_DOCUMENTS

Security
--------
- Never commit secrets or the `.env` file to source control.
- Prefer runtime environment variables in production (K8s/Secrets Manager/etc.).
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DB_DRIVER_NAME: str = Field(..., description="SQLAlchemy driver name (e.g., `postgresql+psycopg2`, `sqlite`).")
    DB_DATABASE_NAME: str = Field(..., description="Name of the application's database (file path for SQLite).")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field(None, description="Hostname or IP address of the database server.")
    DB_PORT: Optional[int] = Field(None, description="Port of the database server.")

    # Auth
    SECRET_KEY: str = Field(..., description="Secret key for signing tokens.")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., `HS256`).")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60, description="Duration (in minutes) before access tokens expire.")

    # HTTP
    FRONTEND_URL: str = Field("http://localhost:5173", description="Origin of the frontend client allowed by CORS.")
    LOG_LEVEL: str = Field("INFO", description="Root logging level.")

    # OpenAI
    API_KEY: Optional[str] = Field(None, description="OpenAI API key. When unset the AI features degrade to fixed messages.")
    OPENAI_BASE_URL: Optional[str] = Field(None, description="Optional OpenAI-compatible base URL.")
    OPEN_AI_MODEL: str = Field("gpt-4.1-nano", description="Chat model used for case answers.")
    VISION_MODEL: str = Field("gpt-4.1-mini", description="Chat model used to describe images and convert HTML.")
    TRANSCRIPTION_MODEL: str = Field("whisper-1", description="Model used for audio transcription.")

    # S3
    AWS_ACCESS_KEY: Optional[str] = Field(None, description="AWS access key ID.")
    AWS_SECRET_KEY: Optional[str] = Field(None, description="AWS secret access key.")
    REGION: Optional[str] = Field(None, description="AWS region name (e.g., `eu-central-1`).")
    BUCKET_NAME: str = Field("casedesk-files", description="Bucket holding uploaded case files.")

    # Policy
    CASE_MAX_DOCUMENTS: int = Field(30, description="Maximum number of documents attached to one case.")
    CASE_MAX_TOTAL_BYTES: int = Field(50 * 1024 * 1024, description="Maximum total UTF-8 size of a case's documents.")
    CONTEXT_PER_DOCUMENT_CHARS: int = Field(2000, description="Characters taken from each document for AI context.")
    CONTEXT_MAX_CHARS: int = Field(12000, description="Total character budget of the AI context block.")
    EXTRACTED_TEXT_MAX_CHARS: int = Field(20000, description="Cap on cached text extracted from a file.")
    AI_TEMPERATURE: float = Field(0.3, description="Sampling temperature of case answers.")
    AI_MAX_OUTPUT_TOKENS: int = Field(600, description="Output token ceiling of case answers.")
    EXTRACTION_MAX_OUTPUT_TOKENS: int = Field(4096, description="Output token ceiling of image and HTML extraction calls.")
    MAX_UPLOAD_BYTES: int = Field(15 * 1024 * 1024, description="Largest accepted file upload.")


# Singleton instance of Settings, ready to be imported across the app
settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
