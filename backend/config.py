"""Configuration management for the recruiter conversation assistant."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# Model Configuration
PRIMARY_MODEL = os.getenv("PRIMARY_MODEL", "llama-3.3-70b-versatile")
FALLBACK_MODEL = os.getenv("FALLBACK_MODEL", "llama-3.1-8b-instant")
VALIDATION_MODEL = os.getenv("VALIDATION_MODEL", "llama-3.1-8b-instant")
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))

# Profile and prompt configuration files
PROFILE_PATH = os.getenv("PROFILE_PATH", "configs/profile.yaml")
PROMPT_CONFIG_PATH = os.getenv("PROMPT_CONFIG_PATH", "configs/prompts.yaml")

# Response history
RESPONSE_HISTORY_PATH = os.getenv("RESPONSE_HISTORY_PATH", "logs/response-history.json")
RESPONSE_LOG_PATH = os.getenv("RESPONSE_LOG_PATH", "logs/responses.jsonl")
RESPONSE_RETENTION_DAYS = int(os.getenv("RESPONSE_RETENTION_DAYS", "30"))

# Reply policy
ALLOW_FOLLOW_UPS = os.getenv("ALLOW_FOLLOW_UPS", "false").lower() == "true"

# Input limits
MAX_INPUT_CHARS = 2000

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
