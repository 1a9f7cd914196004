"""
Text utilities for supplier names.

Used to decide which suppliers quote per garment size.
"""

import unicodedata
from typing import Iterable, Optional


def normalize_supplier_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize supplier name for comparison.

    Handles accents, case and surrounding whitespace:
    - "SanMar Corporation" → "SANMAR CORPORATION"
    - "  s&s activewear " → "S&S ACTIVEWEAR"
    - "Textil Peñaflor" → "TEXTIL PENAFLOR"

    Args:
        name: Original supplier name

    Returns:
        Normalized uppercase ASCII string, or None if input is empty
    """
    if not name:
        return None

    name = name.strip()

    if not name:
        return None

    # NFD separates base chars from accents
    normalized = unicodedata.normalize('NFD', name)

    ascii_name = ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )

    # Collapse internal runs of whitespace
    return ' '.join(ascii_name.upper().split())


def uses_size_pricing(supplier_name: Optional[str], suppliers: Iterable[str]) -> bool:
    """
    Check whether a supplier quotes per garment size.

    Matches when any configured fragment appears in the normalized name,
    so "SanMar Corporation" matches "SANMAR".

    Args:
        supplier_name: Supplier display name
        suppliers: Configured supplier name fragments

    Returns:
        True if the supplier uses size pricing
    """
    normalized = normalize_supplier_name(supplier_name)
    if not normalized:
        return False

    for fragment in suppliers:
        fragment = normalize_supplier_name(fragment)
        if fragment and fragment in normalized:
            return True
    return False
