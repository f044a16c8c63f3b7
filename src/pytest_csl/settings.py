"""Process-level settings.

Settings are read from `PYTEST_CSL_*` environment variables. Command-line
options of the pytest plugin and the CLI take precedence over them.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from pytest_csl.models import SettingsModel
from pytest_csl.paths import default_cache_dir


class CSLSettings(SettingsModel):
    """Runtime settings shared by the plugin and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix='PYTEST_CSL_',
    )

    cache_dir: Path = Field(
        default_factory=default_cache_dir,
        description='Directory holding the cached reference repositories.',
    )

    engine: str | None = Field(
        default=None,
        description=(
            'Rendering engine used when a corpus does not name one. '
            'Either a `module:attribute` path or an entry point name '
            'from the `pytest_csl.engines` group.'
        ),
    )

    refresh: bool = Field(
        default=False,
        description='Pull updates of cached reference repositories.',
    )

    offline: bool = Field(
        default=False,
        description='Never touch the reference repositories.',
    )
