"""
Season-code classification.

A season code is a two-digit fiscal year followed by a type letter:
'24F' (Fall/Winter 2024), '23S' (Spring), '22N' (accessories). Only FW codes
age into the past-season buckets; every other type is treated as in-season.
"""

import re
from typing import Any

from .schemas import SeasonInfo, SeasonType, YearBucket

SEASON_TYPE_BY_SUFFIX = {
    "F": SeasonType.FW,
    "S": SeasonType.S,
    "N": SeasonType.ACC,
}

OFF_SEASON_BUCKETS = frozenset({YearBucket.Y1, YearBucket.Y2, YearBucket.Y3_PLUS})

_YEAR_DIGITS = re.compile(r"[0-9]+")


def year_bucket_for(
    season_type: SeasonType, season_year: int | None, current_fiscal_year: int
) -> YearBucket:
    """Maps a FW season year to its age bucket relative to `current_fiscal_year`."""
    if season_type != SeasonType.FW or season_year is None:
        return YearBucket.IN_SEASON

    diff = current_fiscal_year - season_year
    if diff <= 0:
        # Current season, or a code from a later season.
        return YearBucket.IN_SEASON
    if diff == 1:
        return YearBucket.Y1
    if diff == 2:
        return YearBucket.Y2
    return YearBucket.Y3_PLUS


def parse_season(code: str | None, current_fiscal_year: int) -> SeasonInfo:
    """
    Parses a season code into its type, year and age bucket.
    Empty codes classify as OTHER / in-season; a non-numeric year part gives
    season_year=None.
    """
    season_code = (code or "").strip()
    if not season_code:
        return SeasonInfo()

    suffix = season_code[-1]
    year_part = season_code[:-1]
    season_year = int(year_part) if _YEAR_DIGITS.fullmatch(year_part) else None
    season_type = SEASON_TYPE_BY_SUFFIX.get(suffix, SeasonType.OTHER)

    return SeasonInfo(
        season_code=season_code,
        season_type=season_type,
        season_year=season_year,
        year_bucket=year_bucket_for(season_type, season_year, current_fiscal_year),
    )


def is_off_season_fw(row: Any) -> bool:
    """
    True for FW records that fall in any past-season bucket.
    Accepts any normalized row carrying `season_info`, or a SeasonInfo itself.
    """
    info = row if isinstance(row, SeasonInfo) else row.season_info
    return info.season_type == SeasonType.FW and info.year_bucket in OFF_SEASON_BUCKETS
