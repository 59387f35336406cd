"""
Tiered client search.

A query is run against a fixed sequence of strategies and the first one that
produces a non-empty page wins; later tiers are never consulted and results
are never merged across tiers. Each tier paginates on its own, so page 2 of a
query may be answered by a different tier than page 1.

    1. numeric    all-digit query equals phone or national id
    2. name       two tokens matched across first/last name in either order
    3. substring  whole query contained in any searchable field
    4. fuzzy      full-text match, one edit per term, last term as a prefix
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging
import re

from rapidfuzz.distance import Levenshtein
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, Query

from app.models.client import Client

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("first_name", "last_name", "national_id", "phone", "email", "address")

# Max edits per term in the fuzzy tier; very short terms must match exactly
FUZZINESS = 1
MIN_FUZZY_TERM_LENGTH = 3

DIGITS_RE = re.compile(r"[0-9]+")
TOKEN_RE = re.compile(r"[^\W_]+")

@dataclass
class SearchPage:
    """One page of search results and the tier that produced it"""
    records: List[Client] = field(default_factory=list)
    tier: Optional[str] = None
    total_matches: int = 0

def tokenize(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return TOKEN_RE.findall(text.lower())

def term_distance(term: str, token: str, prefix: bool = False) -> Optional[int]:
    """Edit distance between a query term and a field token, None when too far"""
    candidate = token[:len(term)] if prefix else token
    max_edits = FUZZINESS if len(term) >= MIN_FUZZY_TERM_LENGTH else 0
    distance = Levenshtein.distance(term, candidate, score_cutoff=max_edits)
    return distance if distance <= max_edits else None

def phrase_distance(terms: Sequence[str], tokens: Sequence[str]) -> Optional[int]:
    """Best total distance of `terms` against any run of consecutive `tokens`.

    The last term only has to match the start of its token, so "main stre"
    finds "12 Main Street".
    """
    best = None
    count = len(terms)
    for start in range(len(tokens) - count + 1):
        total = 0
        for position, term in enumerate(terms):
            distance = term_distance(term, tokens[start + position], prefix=position == count - 1)
            if distance is None:
                break
            total += distance
        else:
            if best is None or total < best:
                best = total
    return best

class ClientSearch:
    """Runs the search tiers against the clients table"""

    def __init__(self, db: Session):
        self.db = db

    def search(self, query: str, page: int = 1, page_size: int = 10) -> SearchPage:
        text = query.strip()
        if not text:
            return SearchPage()

        offset = (page - 1) * page_size
        tiers = (
            ("numeric", self._numeric_tier),
            ("name", self._name_tier),
            ("substring", self._substring_tier),
        )
        for tier_name, build_query in tiers:
            base = build_query(text)
            if base is None:
                continue
            records = self._ordered(base).offset(offset).limit(page_size).all()
            if records:
                logger.info(f"Client search '{text}' answered by {tier_name} tier")
                return SearchPage(records=records, tier=tier_name, total_matches=base.count())

        return self._fuzzy_tier(text, offset, page_size)

    def _ordered(self, query: Query) -> Query:
        return query.order_by(Client.created_at.desc(), Client.id.desc())

    def _numeric_tier(self, text: str) -> Optional[Query]:
        if not DIGITS_RE.fullmatch(text):
            return None
        return self.db.query(Client).filter(
            or_(Client.phone == text, Client.national_id == text)
        )

    def _name_tier(self, text: str) -> Optional[Query]:
        tokens = text.split()
        if len(tokens) < 2:
            return None
        first, second = tokens[0], tokens[1]
        return self.db.query(Client).filter(
            or_(
                and_(
                    Client.first_name.contains(first, autoescape=True),
                    Client.last_name.contains(second, autoescape=True),
                ),
                and_(
                    Client.first_name.contains(second, autoescape=True),
                    Client.last_name.contains(first, autoescape=True),
                ),
            )
        )

    def _substring_tier(self, text: str) -> Query:
        return self.db.query(Client).filter(
            or_(*[getattr(Client, name).contains(text, autoescape=True) for name in SEARCH_FIELDS])
        )

    def _fuzzy_tier(self, text: str, offset: int, page_size: int) -> SearchPage:
        terms = tokenize(text)
        if not terms:
            return SearchPage()

        columns = [Client.id] + [getattr(Client, name) for name in SEARCH_FIELDS]
        scored: List[Tuple[int, int]] = []
        for row in self.db.query(*columns).yield_per(500):
            client_id, values = row[0], row[1:]
            distances = [
                d for d in (phrase_distance(terms, tokenize(value)) for value in values)
                if d is not None
            ]
            if distances:
                scored.append((min(distances), client_id))

        if not scored:
            logger.info(f"Client search '{text}' found no matches")
            return SearchPage()

        # Closest first, newest first among equals
        scored.sort(key=lambda item: (item[0], -item[1]))
        page_ids = [client_id for _, client_id in scored[offset:offset + page_size]]
        if not page_ids:
            return SearchPage()

        by_id = {c.id: c for c in self.db.query(Client).filter(Client.id.in_(page_ids)).all()}
        records = [by_id[client_id] for client_id in page_ids if client_id in by_id]

        logger.info(f"Client search '{text}' answered by fuzzy tier")
        return SearchPage(records=records, tier="fuzzy", total_matches=len(scored))
