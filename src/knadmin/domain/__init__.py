"""Pure domain logic: selector parsing and domain record merging.

No I/O lives here. Infrastructure and services depend on this package,
never the reverse.
"""
