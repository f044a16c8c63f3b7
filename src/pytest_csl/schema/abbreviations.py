"""Abbreviation sets attached to test cases."""

from typing import Any

from pydantic import ConfigDict, Field, model_validator

from pytest_csl.models import SchemaModel

#: Jurisdiction used when a set does not name one.
DEFAULT_JURISDICTION = 'default'

#: Fixed universe of abbreviation categories, in the order the rendering
#: engine declares its abbreviation segments.
CATEGORIES = (
    'container-title',
    'collection-title',
    'institution-entire',
    'institution-part',
    'nickname',
    'number',
    'title',
    'place',
    'hereinafter',
    'classic',
    'container-phrase',
    'title-phrase',
)


class AbbreviationSet(SchemaModel):
    """Abbreviations of one jurisdiction.

    Categories may be written either under a `categories` key or inline
    next to `jurisdiction`::

        - jurisdiction: us
          institution-part:
            Supreme Court: S. Ct.

    Inline keys outside the category universe are kept as unknown fields.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    jurisdiction: str = Field(
        default=DEFAULT_JURISDICTION,
        title='Jurisdiction',
        description='Jurisdiction the abbreviations apply to.',
    )

    categories: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        title='Abbreviations by category',
        description='Mapping of category name to raw key and abbreviation.',
    )

    @model_validator(mode='before')
    @classmethod
    def fold_inline_categories(cls, data: Any) -> Any:  # noqa: ANN401
        """Move inline category keys under `categories`.

        Raises:
            ValueError: If `categories` or an inline category is not a mapping.
        """
        if not isinstance(data, dict):
            return data

        inline = {key: value for key, value in data.items() if key in CATEGORIES}
        if not inline:
            return data

        rest = {key: value for key, value in data.items() if key not in CATEGORIES}
        categories = rest.get('categories') or {}
        if not isinstance(categories, dict):
            raise ValueError('`categories` must be a mapping of categories')

        categories = dict(categories)
        for category, values in inline.items():
            if values is not None and not isinstance(values, dict):
                raise ValueError(f'Abbreviations of `{category}` must be a mapping')
            existing = categories.get(category)
            if existing is not None and not isinstance(existing, dict):
                raise ValueError(f'Abbreviations of `{category}` must be a mapping')
            categories[category] = {**(values or {}), **(existing or {})}

        return {**rest, 'categories': categories}
