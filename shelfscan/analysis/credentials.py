"""Pre-flight inspection of the analysis service credentials.

Edge Functions reject placeholder credentials and publishable keys with a
bare 401, so both are caught here by string inspection before any request
is made.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from .errors import AnalysisError, ErrorCode

if TYPE_CHECKING:
    from ..config import SupabaseConfig

_URL_PLACEHOLDER_MARKERS = ("placeholder", "your-project")
_KEY_PLACEHOLDER_MARKERS = ("placeholder", "your-anon")

PUBLISHABLE_KEY_PREFIX = "sb_publishable_"
JWT_KEY_PREFIX = "eyJ"


class ConfigStatus(str, Enum):
    OK = "OK"
    PLACEHOLDER_CREDENTIALS = "PLACEHOLDER_CREDENTIALS"
    WRONG_KEY_TYPE = "WRONG_KEY_TYPE"


def validate_config(url: str | None, key: str | None) -> ConfigStatus:
    """Classify a URL/key pair without touching the network.

    Checks run in order and the first match wins: empty or placeholder
    values, then a publishable key where a JWT anon key is required.
    """
    url = url or ""
    key = key or ""

    url_is_placeholder = not url or any(m in url for m in _URL_PLACEHOLDER_MARKERS)
    key_is_placeholder = not key or any(m in key for m in _KEY_PLACEHOLDER_MARKERS)
    if url_is_placeholder or key_is_placeholder:
        return ConfigStatus.PLACEHOLDER_CREDENTIALS

    if key.startswith(PUBLISHABLE_KEY_PREFIX) and not key.startswith(JWT_KEY_PREFIX):
        return ConfigStatus.WRONG_KEY_TYPE

    return ConfigStatus.OK


def is_analysis_configured(config: SupabaseConfig | None) -> bool:
    """True if analysis can be attempted with this configuration."""
    if config is None or not config.is_set:
        return False
    return validate_config(config.url, config.anon_key) is ConfigStatus.OK


def not_configured_error() -> AnalysisError:
    """Build the error for a configuration with neither URL nor key set."""
    return AnalysisError(
        "The analysis service is not configured. Set SUPABASE_URL and "
        "SUPABASE_ANON_KEY, or add a [supabase] section to the config file.",
        ErrorCode.NOT_CONFIGURED,
    )


def config_error(status: ConfigStatus) -> AnalysisError:
    """Build the classified error for a non-OK configuration status."""
    match status:
        case ConfigStatus.PLACEHOLDER_CREDENTIALS:
            return AnalysisError(
                "The analysis service credentials are not properly configured. "
                "Placeholder values will be rejected with 401 errors.\n\n"
                "Please:\n"
                "1. Make sure your .env file or config file sets the Supabase "
                "URL and anon key\n"
                "2. Restart the app so the new values are loaded",
                ErrorCode.PLACEHOLDER_CREDENTIALS,
            )
        case ConfigStatus.WRONG_KEY_TYPE:
            return AnalysisError(
                "Wrong key type detected. You are using a Supabase publishable "
                f'key (starts with "{PUBLISHABLE_KEY_PREFIX}"), but Edge Functions '
                f'require the JWT anon key (starts with "{JWT_KEY_PREFIX}").\n\n'
                "To fix this:\n"
                "1. Open your project in the Supabase dashboard\n"
                "2. Go to Settings → API\n"
                '3. Copy the "anon public" key (not the publishable key)\n'
                "4. Update SUPABASE_ANON_KEY and restart the app",
                ErrorCode.WRONG_KEY_TYPE,
            )
        case _:
            raise ValueError(f"No error for configuration status {status!r}")
