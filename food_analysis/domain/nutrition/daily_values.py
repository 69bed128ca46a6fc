"""Reference daily values (FDA, adults) used to express micronutrients as %DV."""

from __future__ import annotations

from typing import Final, Mapping, Optional

# Amounts in mg unless the key ends with "_ug".
DAILY_VALUES: Final[dict[str, float]] = {
    "vitamin_c": 90.0,
    "iron": 18.0,
    "calcium": 1300.0,
    "potassium": 4700.0,
    "magnesium": 420.0,
    "zinc": 11.0,
    "phosphorus": 1250.0,
    "vitamin_e": 15.0,
    "vitamin_a_ug": 900.0,
    "vitamin_d_ug": 20.0,
    "vitamin_b12_ug": 2.4,
    "folate_ug": 400.0,
    "vitamin_k_ug": 120.0,
}


def percent_daily_values(amounts: Mapping[str, Optional[float]]) -> dict[str, float]:
    """
    Convert micronutrient amounts into percent of daily value.

    Unknown amounts and nutrients without a reference are skipped, so an
    unknown value never shows up as 0 %DV.

    Example:
        >>> percent_daily_values({"vitamin_c": 45.0, "iron": None})
        {'vitamin_c': 50.0}
    """
    result: dict[str, float] = {}
    for key, amount in amounts.items():
        reference = DAILY_VALUES.get(key)
        if amount is None or reference is None:
            continue
        result[key] = round(amount / reference * 100.0, 2)
    return result
