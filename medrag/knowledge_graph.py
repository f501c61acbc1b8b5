# Knowledge graph keyword search over the entity/relationship tables

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from .database import DatabaseService, EntityRecord, RelationshipRecord
from .models import KGEntity, KGMatch, KGRelationship, SubQuery, SubQueryResult

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset([
    "what", "is", "are", "the", "a", "an", "how", "do", "does", "can", "could",
    "should", "would", "will", "be", "been", "being", "have", "has", "had",
    "of", "for", "to", "in", "on", "at", "by", "with", "from", "about",
    "i", "you", "we", "they", "it", "this", "that", "these", "those",
])

MIN_KEYWORD_LENGTH = 3
ENTITIES_PER_KEYWORD = 5
RELATIONSHIPS_PER_ENTITY = 10

# Category -> entity_type values / relationship_type substrings it accepts
TYPE_FILTERS: Dict[str, Sequence[str]] = {
    "symptoms": ("symptom", "sign"),
    "causes": ("cause", "risk_factor"),
    "treatment": ("treatment", "drug", "therapy"),
    "prevention": ("prevention", "lifestyle"),
    "diagnosis": ("diagnosis", "test"),
}
UNFILTERED_TYPES = frozenset(["general", "definition"])
MAX_RESULTS = 10
FALLBACK_RESULTS = 5


def extract_keywords(query: str) -> List[str]:
    """Lowercased search terms of a query, in first-seen order.

    Punctuation becomes whitespace; stop words and words shorter than
    three characters are dropped.
    """
    cleaned = re.sub(r"[^\w\s]", " ", query.lower())
    words = [
        word for word in cleaned.split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
    ]
    return list(dict.fromkeys(words))


def deduplicate_entities(matches: Iterable[KGMatch]) -> List[KGMatch]:
    seen = set()
    unique = []
    for match in matches:
        if match.entity.id not in seen:
            seen.add(match.entity.id)
            unique.append(match)
    return unique


def _matches_category(match: KGMatch, allowed: Sequence[str]) -> bool:
    if match.entity.entity_type in allowed:
        return True
    return any(
        allowed_type in (rel.relationship_type or "")
        for rel in match.relationships
        for allowed_type in allowed
    )


def filter_by_query_type(matches: List[KGMatch], query_type: Optional[str]) -> List[KGMatch]:
    """Narrow matches to a sub-query category.

    1. no category, "general" or "definition": first MAX_RESULTS as-is
    2. matches accepted by the category filter: first MAX_RESULTS of those
    3. nothing accepted: first FALLBACK_RESULTS as-is
    """
    if not query_type or query_type in UNFILTERED_TYPES:
        return matches[:MAX_RESULTS]

    allowed = TYPE_FILTERS.get(query_type, ())
    filtered = [match for match in matches if _matches_category(match, allowed)]
    if filtered:
        return filtered[:MAX_RESULTS]

    return matches[:FALLBACK_RESULTS]


class KnowledgeGraphService:
    def __init__(self, database: DatabaseService):
        self.database = database

    def _find_entities(self, session, keyword: str) -> List[EntityRecord]:
        pattern = f"%{keyword}%"
        return (
            session.query(EntityRecord)
            .filter(or_(EntityRecord.name.ilike(pattern), EntityRecord.description.ilike(pattern)))
            .limit(ENTITIES_PER_KEYWORD)
            .all()
        )

    def _find_relationships(self, session, entity_id: str) -> List[RelationshipRecord]:
        return (
            session.query(RelationshipRecord)
            .filter(or_(
                RelationshipRecord.from_entity_id == entity_id,
                RelationshipRecord.to_entity_id == entity_id,
            ))
            .limit(RELATIONSHIPS_PER_ENTITY)
            .all()
        )

    def search(self, query: str, query_type: Optional[str] = None) -> List[KGMatch]:
        try:
            keywords = extract_keywords(query)
            found: List[KGMatch] = []

            with self.database.session() as session:
                for keyword in keywords:
                    try:
                        entities = self._find_entities(session, keyword)
                    except SQLAlchemyError as e:
                        logger.error(f"Entity search error for '{keyword}': {e}")
                        session.rollback()
                        continue

                    for entity in entities:
                        try:
                            relationships = [
                                KGRelationship.model_validate(rel)
                                for rel in self._find_relationships(session, entity.id)
                            ]
                        except SQLAlchemyError as e:
                            logger.error(f"Relationship fetch error for entity {entity.id}: {e}")
                            session.rollback()
                            relationships = []

                        found.append(KGMatch(
                            entity=KGEntity.model_validate(entity),
                            relationships=relationships,
                        ))

            unique = deduplicate_entities(found)
            return filter_by_query_type(unique, query_type)
        except Exception as e:
            logger.error(f"KG search error for '{query}': {e}", exc_info=True)
            return []

    def navigate(self, sub_queries: List[SubQuery]) -> List[SubQueryResult]:
        results = []
        for sub_query in sub_queries:
            entities = self.search(sub_query.query, sub_query.type)
            logger.info(f"Sub-query '{sub_query.query}' ({sub_query.type}): {len(entities)} entities")
            results.append(SubQueryResult(
                subQuery=sub_query.query,
                type=sub_query.type,
                entities=entities,
            ))
        return results
