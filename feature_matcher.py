"""
Name-based lookup of Natural Earth features for canonical game names.

Natural Earth spreads a feature's name over several fields (name, name_en,
name_alt) and rarely agrees with the names the quiz uses. Every source
feature is indexed under each populated name field; a game name is then
resolved through its list of source-name patterns.

Non-exact patterns match an indexed name when it is equal to the pattern,
starts with "<pattern> ", or ends with " <pattern>". Exact-only game names
skip the prefix/suffix modes ("Rio Grande" must not pick up
"Río Grande de Matagalpa").
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_NAME_FIELDS = ("name", "name_en", "name_alt")

NameIndex = Dict[str, List[Dict]]


def build_name_index(features: Iterable[Dict], field: str) -> NameIndex:
    """Map each non-empty value of properties[field] to the features carrying it."""
    index: NameIndex = {}
    for feature in features:
        props = feature.get("properties") or {}
        key = props.get(field)
        if not key or not isinstance(key, str):
            continue
        index.setdefault(key, []).append(feature)
    return index


def build_name_indexes(features: Sequence[Dict], fields: Sequence[str] = DEFAULT_NAME_FIELDS) -> Dict[str, NameIndex]:
    """One index per name field, in field order."""
    return {field: build_name_index(features, field) for field in fields}


def name_matches(indexed_name: str, pattern: str) -> bool:
    return (
        indexed_name == pattern
        or indexed_name.startswith(pattern + " ")
        or indexed_name.endswith(" " + pattern)
    )


def match_features(
    patterns: Sequence[str],
    indexes: Iterable[NameIndex],
    exact: bool = False,
) -> List[Dict]:
    """
    Union of features matched by any pattern in any index.

    Results are de-duplicated by object identity, since one feature usually
    sits in more than one index. Order follows pattern order, then index
    order, then index insertion order.
    """
    indexes = list(indexes)
    seen = set()
    matched: List[Dict] = []

    def add(features: List[Dict]):
        for feature in features:
            if id(feature) not in seen:
                seen.add(id(feature))
                matched.append(feature)

    for pattern in patterns:
        for index in indexes:
            if exact:
                if pattern in index:
                    add(index[pattern])
                continue
            for indexed_name, features in index.items():
                if name_matches(indexed_name, pattern):
                    add(features)

    return matched


class FeatureMatcher:
    """
    Resolves game feature names against one combined set of source features.

    exact_match_only names always use exact matching; exact=True makes every
    name exact (the lakes table is written with full Natural Earth names).
    """

    def __init__(
        self,
        features: Sequence[Dict],
        name_fields: Sequence[str] = DEFAULT_NAME_FIELDS,
        exact_match_only: Optional[Iterable[str]] = None,
        exact: bool = False,
    ):
        self.name_fields = tuple(name_fields)
        self.indexes = build_name_indexes(features, self.name_fields)
        self.exact_match_only = frozenset(exact_match_only or ())
        self.exact = exact

    def index_sizes(self) -> Dict[str, int]:
        return {field: len(index) for field, index in self.indexes.items()}

    def is_exact(self, game_name: str) -> bool:
        return self.exact or game_name in self.exact_match_only

    def match(self, game_name: str, patterns: Sequence[str]) -> List[Dict]:
        """
        Source features for one game name.

        A game name with no matches is logged as a coverage warning and gets
        an empty list back; callers carry on with the next name.
        """
        features = match_features(patterns, self.indexes.values(), exact=self.is_exact(game_name))
        if not features:
            logger.warning(f"⚠ No source features for: {game_name} (patterns: {', '.join(patterns)})")
        return features
