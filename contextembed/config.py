import os

CONTEXTEMBED_PROVIDER = os.environ.get("CONTEXTEMBED_PROVIDER", "openai")

OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY", "")
OLLAMA_URL = os.environ.get("OLLAMA_URL", "http://localhost:11434")

VISION_MODEL = os.environ.get("VISION_MODEL", "gpt-4o")
LLM_MODEL = os.environ.get("LLM_MODEL", "gpt-4o")
ALT_TEXT_MODEL = os.environ.get("ALT_TEXT_MODEL", "gpt-4o")

VISION_MAX_TOKENS = int(os.environ.get("VISION_MAX_TOKENS", "4096"))
LLM_MAX_TOKENS = int(os.environ.get("LLM_MAX_TOKENS", "4096"))
ALT_TEXT_MAX_TOKENS = int(os.environ.get("ALT_TEXT_MAX_TOKENS", "1024"))

VISION_TEMPERATURE = float(os.environ.get("VISION_TEMPERATURE", "0.3"))
LLM_TEMPERATURE = float(os.environ.get("LLM_TEMPERATURE", "0.5"))
ALT_TEXT_TEMPERATURE = float(os.environ.get("ALT_TEXT_TEMPERATURE", "0.4"))

# ALT_TEXT_RETRY=false disables the second attempt; the fallback still applies
ALT_TEXT_RETRY = os.environ.get("ALT_TEXT_RETRY", "true").lower() not in ("0", "false", "no")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
