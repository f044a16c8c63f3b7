"""Cite item references used as rendering input."""

from pydantic import ConfigDict, Field

from pytest_csl.models import SchemaModel

#: Label assumed for a locator that does not name one.
DEFAULT_LABEL = 'page'


class CiteItem(SchemaModel):
    """A reference to a library record plus optional rendering hints.

    Only `id`, `locator` and `label` are interpreted here. Any other
    hint (`prefix`, `suffix`, `suppress-author`, ...) is kept as is and
    handed to the rendering engine unchanged.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(
        title='Item identifier',
        description='Identifier of a record in the reference library.',
    )

    locator: str | int | None = Field(
        default=None,
        title='Locator',
        description='Pinpoint within the cited work, for example a page. Numbers are kept as numbers.',
    )

    label: str | None = Field(
        default=None,
        title='Locator label',
        description=f'Kind of locator. Defaults to `{DEFAULT_LABEL}` when a locator is set.',
    )

    def with_default_label(self) -> 'CiteItem':
        """Return the item with a locator label filled in.

        An explicit label is never overwritten, and items without a
        locator are returned unchanged.
        """
        if self.locator not in (None, '') and not self.label:
            return self.model_copy(update={'label': DEFAULT_LABEL})

        return self


#: One citation call site.
type Cluster = list[CiteItem]
