# Database access for the knowledge graph tables

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Column, ForeignKey, JSON, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class EntityRecord(Base):
    __tablename__ = "knowledge_graph_entities"

    id = Column(String, primary_key=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    entity_type = Column(String, index=True)
    properties = Column(JSON)


class RelationshipRecord(Base):
    __tablename__ = "knowledge_graph_relationships"

    id = Column(String, primary_key=True)
    from_entity_id = Column(String, ForeignKey("knowledge_graph_entities.id"), nullable=False, index=True)
    to_entity_id = Column(String, ForeignKey("knowledge_graph_entities.id"), nullable=False, index=True)
    relationship_type = Column(String)
    properties = Column(JSON)

    from_entity = relationship(EntityRecord, foreign_keys=[from_entity_id], lazy="joined")
    to_entity = relationship(EntityRecord, foreign_keys=[to_entity_id], lazy="joined")


class DatabaseService:
    def __init__(self, url: str = "sqlite:///./knowledge_graph.db"):
        kwargs = {}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url == "sqlite://":
                # one shared connection, otherwise every session sees an empty database
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, **kwargs)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def init_db(self):
        Base.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
