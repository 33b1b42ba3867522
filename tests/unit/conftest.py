"""
Fakes pour les tests unitaires.

Repositories et Unit of Work en mémoire : ils permettent de tester
services et mappers sans base de données ni I/O.
"""

from __future__ import annotations

import itertools

import pytest

from boutique.adapters.repository import AbstractProduitRepository, AbstractRepository
from boutique.service_layer import bootstrap, unit_of_work


class FakeRepository(AbstractRepository):
    """
    Repository en mémoire.

    Un dict id -> entité tient lieu de table ; les identifiants
    sont attribués par un compteur, comme une séquence SQL.
    """

    def __init__(self, entités=()):
        self._entités = {}
        self._séquence = itertools.count(1)
        for entité in entités:
            self._add(entité)

    def _add(self, entité) -> None:
        if entité.id is None:
            entité.id = next(self._séquence)
        self._entités[entité.id] = entité

    def _get(self, id):
        return self._entités.get(id)

    def _list(self):
        return [self._entités[id] for id in sorted(self._entités)]

    def _delete(self, entité) -> None:
        del self._entités[entité.id]


class FakeProduitRepository(FakeRepository, AbstractProduitRepository):
    def __init__(self, entités=()):
        super().__init__(entités)
        self.bag_fetches = 0

    def _fetch_bag_relationships(self, ids):
        self.bag_fetches += 1
        return [self._entités[id] for id in ids if id in self._entités]

    def find_by_specification(self, clauses, distinct=False):
        raise NotImplementedError("filtrage SQL : voir les tests d'intégration")

    def count_by_specification(self, clauses, distinct=False):
        raise NotImplementedError("filtrage SQL : voir les tests d'intégration")


class FakeUnitOfWork(unit_of_work.AbstractUnitOfWork):
    """
    Unit of Work en mémoire.

    `committed` et `rollbacks` permettent de vérifier la gestion
    de la transaction dans les tests.
    """

    def __init__(self) -> None:
        self.commandes = FakeRepository()
        self.produits = FakeProduitRepository()
        self.avis = FakeRepository()
        self.cartes_bancaires = FakeRepository()
        self.lignes_commande = FakeRepository()
        self.committed = False
        self.rollbacks = 0

    def _commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rollbacks += 1


@pytest.fixture
def fake_uow():
    return FakeUnitOfWork()


@pytest.fixture
def services(fake_uow):
    """Services câblés sur le Unit of Work en mémoire."""
    return bootstrap.bootstrap(start_orm=False, uow_factory=lambda: fake_uow)
