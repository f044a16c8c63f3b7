"""Base Pydantic models for corpus documents and runtime settings.

Suite documents are authored by hand and routinely carry fields this
package does not interpret (notes, authoring metadata, engine-specific
cite item hints). The models therefore keep unknown fields and hand them
back unchanged when dumped, while remaining immutable once parsed.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all corpus elements.

    Design principles enforced by this model:
        - Immutability: parsed elements are never modified in place;
          normalization produces copies.
        - Pass-through: unknown fields are preserved so documents survive
          merging and normalization without loss.
        - Aliases: fields are populated by their document names and
          dumped back under them.

    All corpus models must inherit from this class.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='allow',
        populate_by_name=True,
    )

    def dump(self) -> dict[str, Any]:
        """Dump the element back into its document form.

        Returns:
            A plain mapping using document field names, without absent
            optional fields.
        """
        return self.model_dump(
            mode='json',
            by_alias=True,
            exclude_none=True,
        )


class StrictModel(BaseModel):
    """Base immutable model for configuration documents.

    Configuration keys are a closed set: unknown keys are rejected so
    typos fail at load time instead of being silently ignored.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='forbid',
        populate_by_name=True,
    )


class SettingsModel(BaseSettings):
    """Base immutable model for process-level settings.

    Unknown environment variables are ignored so the surrounding
    environment can contain unrelated variables.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
