"""Built-in Rules

- basic: length, range, pattern, membership, runtime type
- format: email, url, numeric, integer, date
- cross_field: comparisons against sibling fields in form_data
- combinators: and_/or_/not_, when/conditional, custom, lazy, ref
"""
from .basic import (
    required,
    min_length,
    max_length,
    min_value,
    max_value,
    value_range,
    pattern,
    one_of,
    array_length,
    type_of,
    type_name,
)

from .format import (
    email,
    url,
    numeric,
    integer,
    date,
    is_url,
)

from .cross_field import (
    get_field_value,
    match_field,
    greater_than,
    less_than,
    after_date,
    before_date,
    required_if,
    excludes_with,
)

from .combinators import (
    and_,
    or_,
    not_,
    when,
    conditional,
    ConditionalRoute,
    ref,
    custom,
    lazy,
)

__all__ = [
    # Basic
    "required",
    "min_length",
    "max_length",
    "min_value",
    "max_value",
    "value_range",
    "pattern",
    "one_of",
    "array_length",
    "type_of",
    "type_name",
    # Format
    "email",
    "url",
    "numeric",
    "integer",
    "date",
    "is_url",
    # Cross-field
    "get_field_value",
    "match_field",
    "greater_than",
    "less_than",
    "after_date",
    "before_date",
    "required_if",
    "excludes_with",
    # Combinators
    "and_",
    "or_",
    "not_",
    "when",
    "conditional",
    "ConditionalRoute",
    "ref",
    "custom",
    "lazy",
]
