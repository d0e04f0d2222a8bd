"""
App settings - DB path, AI gateway endpoint, booking limits.
"""

import os

DB_PATH = os.getenv("TABLELINK_DB_PATH", "tablelink.db")
DB_TIMEOUT = float(os.getenv("TABLELINK_DB_TIMEOUT", "30"))

PUBLIC_BASE_URL = os.getenv("TABLELINK_PUBLIC_URL", "http://localhost:8501")

AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
AI_API_KEY = os.getenv("AI_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "google/gemini-2.5-flash")
LLM_TIMEOUT = 60

MIN_GUESTS = 1
MAX_GUESTS = 20

LOG_LEVEL = os.getenv("TABLELINK_LOG_LEVEL", "INFO")
