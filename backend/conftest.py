import os

import pytest

# Nothing under test may reach a real provider, bucket or database. These
# are set before `app` is imported so module-level lookups see them too.
PROVIDER_ENV_VARS = (
    "GEMINI_API_KEY",
    "ANTHROPIC_API_KEY",
    "OLLAMA_HOST",
    "ELEVENLABS_API_KEY",
    "REPLICATE_API_TOKEN",
    "FAL_KEY",
    "DID_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_SERVICE_KEY",
    "EXTRACTION_SERVICE_URL",
    "CONTENT_PROVIDERS",
    "TTS_ENGINE",
    "PUBLIC_BASE_URL",
)

for _name in PROVIDER_ENV_VARS:
    os.environ.pop(_name, None)
os.environ["STORAGE_BACKEND"] = "local"


@pytest.fixture(autouse=True)
def offline_env(monkeypatch):
    """Keep every test offline regardless of the developer's .env"""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STORAGE_BACKEND", "local")


async def no_sleep(_seconds):
    return None


@pytest.fixture
def instant_sleep():
    """Sleep replacement for the job poller"""
    return no_sleep
