"""
Supabase client construction.

The pipeline never reaches for a global client itself; `create_supabase_client`
is called once by the composition root and the handle is injected into the
storage and repository classes.
"""

import os
from typing import Optional

from supabase import Client, create_client


def supabase_configured() -> bool:
    return bool(os.getenv("SUPABASE_URL") and _service_key())


def _service_key() -> Optional[str]:
    return os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")


def create_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    """Build a Supabase client from explicit values or the environment.

    Raises:
        ValueError: if the URL or key is missing
    """
    url = url or os.getenv("SUPABASE_URL")
    key = key or _service_key()
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
    return create_client(url, key)
