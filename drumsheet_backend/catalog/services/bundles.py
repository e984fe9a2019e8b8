"""
PATH: catalog/services/bundles.py

Collection pricing: spread a bundle's sale_price across its sheets in
proportion to their list prices. The last sheet absorbs the rounding
remainder, and earlier shares are capped at what is left, so
allocations always sum to sale_price exactly.
"""

from __future__ import annotations


def allocate_bundle_prices(sheets, sale_price: int) -> dict:
    """
    Returns {sheet.id: allocated_price}.
    """
    sheets = list(sheets)
    sale_price = max(0, int(sale_price or 0))
    if not sheets:
        return {}

    total_individual = sum(int(s.price or 0) for s in sheets)
    allocations = {}
    running = 0

    for index, sheet in enumerate(sheets):
        if index == len(sheets) - 1:
            price = sale_price - running
        elif total_individual > 0:
            price = round(int(sheet.price or 0) * sale_price / total_individual)
        else:
            price = sale_price // len(sheets)
        price = min(max(0, price), sale_price - running)
        allocations[sheet.id] = price
        running += price

    return allocations
