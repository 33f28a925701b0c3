"""
Join keys for census geographies.

A block-group GEOID is the concatenation of its state, county, tract and
block-group codes, in that order and with no separator. The parts are taken
as-is: no zero padding and no validation, so a malformed part simply yields
a key that will not match anything in the demographic index.
"""

from typing import Sequence

GEOID_PART_NAMES = ("state", "county", "tract", "block group")


def build_geo_id(id_parts: Sequence[str]) -> str:
    """
    Build the GEOID join key from its identifier parts.

    Args:
        id_parts: (state, county, tract, block group) codes as text

    Returns:
        Concatenated GEOID string
    """
    state, county, tract, block_group = id_parts
    return f"{state}{county}{tract}{block_group}"
