"""
Configuration partagée pour les tests.

Le mapping ORM est démarré une seule fois pour toute la session de tests.
Les tests d'intégration et e2e utilisent une base SQLite en mémoire,
recréée pour chaque test.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from boutique.adapters import orm
from boutique.service_layer import unit_of_work


@pytest.fixture(scope="session", autouse=True)
def mappers():
    """Démarre le mapping ORM une fois pour toute la session."""
    orm.start_mappers()


@pytest.fixture
def session_factory():
    """Session factory sur une base SQLite en mémoire avec les tables."""
    engine = create_engine("sqlite:///:memory:")
    orm.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sqlite_uow(session_factory):
    return unit_of_work.SqlAlchemyUnitOfWork(session_factory=session_factory)


@pytest.fixture
def sqlite_uow_factory(session_factory):
    """Fabrique de UoW comme en production : un UoW neuf par appel."""
    return lambda: unit_of_work.SqlAlchemyUnitOfWork(session_factory=session_factory)
