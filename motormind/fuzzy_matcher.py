"""Deterministic similar-model search used to ground oracle recommendations."""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable, List

from .inventory_store import InventoryItem
from .utils import normalize_text

BRAND_RE = re.compile(r"\b(hero|honda|bajaj|tvs|yamaha|ktm|royal enfield)\b")
QUALIFIER_RE = re.compile(r"\b(super|plus|pro|max|deluxe|premium)\b")
MODEL_FAMILIES = ["splendor", "pulsar", "activa", "shine"]
MIN_TOKEN_LENGTH = 3


def generate_search_patterns(term: str) -> List[str]:
    """Purpose: Derive substring patterns for a requested model name.
    Inputs/Outputs: Input is the raw term; output is an ordered, de-duplicated list of
        lowercase patterns (full term, core tokens, canonical families).
    Side Effects / State: None; pure function.
    Dependencies: Uses normalize_text, BRAND_RE, QUALIFIER_RE, MODEL_FAMILIES.
    Failure Modes: A blank term yields an empty list.
    If Removed: Recommendation search only finds literal model names.
    Testing Notes: "Hero Super Splendor" -> ["hero super splendor", "splendor"].
    """
    # Full term first, then brand/qualifier-stripped tokens, then known families.
    search_term = normalize_text(term)
    if not search_term:
        return []
    patterns = [search_term]

    core = QUALIFIER_RE.sub("", BRAND_RE.sub("", search_term)).strip()
    for token in core.split():
        if len(token) >= MIN_TOKEN_LENGTH and token not in patterns:
            patterns.append(token)

    for family in MODEL_FAMILIES:
        if family in search_term and family not in patterns:
            patterns.append(family)
    return patterns


def compare_relevance(a: InventoryItem, b: InventoryItem, term: str) -> int:
    """Purpose: Order two items by relevance to a lowercase search term.
    Inputs/Outputs: Inputs are two items and the normalized term; output is -1/0/1.
    Side Effects / State: None.
    Dependencies: Used through cmp_to_key by sort_by_relevance.
    Failure Modes: None.
    If Removed: Recommendation candidates lose their precedence order.
    Testing Notes: Equality beats prefix, prefix beats substring, then alphabetical.
    """
    a_model = a.model.lower()
    b_model = b.model.lower()
    checks = (
        lambda model: model == term,
        lambda model: model.startswith(term),
        lambda model: term in model,
    )
    for check in checks:
        a_hit = check(a_model)
        b_hit = check(b_model)
        if a_hit != b_hit:
            return -1 if a_hit else 1
    for a_key, b_key in ((a_model, b_model), (a.model, b.model), (a.id, b.id)):
        if a_key != b_key:
            return -1 if a_key < b_key else 1
    return 0


def sort_by_relevance(items: Iterable[InventoryItem], term: str) -> List[InventoryItem]:
    search_term = normalize_text(term)
    return sorted(items, key=cmp_to_key(lambda a, b: compare_relevance(a, b, search_term)))


def find_similar(term: str, candidates: Iterable[InventoryItem]) -> List[InventoryItem]:
    """Purpose: Find in-stock items whose model contains any generated pattern.
    Inputs/Outputs: Inputs are the requested model and a candidate collection; output
        is the ranked list of matches.
    Side Effects / State: None.
    Dependencies: Uses generate_search_patterns and sort_by_relevance.
    Failure Modes: Returns an empty list when nothing matches or the term is blank.
    If Removed: The recommendation path has no grounded candidates.
    Testing Notes: "Yamaha R15" should not match "Yamaha FZ" (brand is stripped).
    """
    patterns = generate_search_patterns(term)
    if not patterns:
        return []
    matches = [
        item
        for item in candidates
        if item.stock >= 1 and any(pattern in item.model.lower() for pattern in patterns)
    ]
    return sort_by_relevance(matches, term)
