"""
Bootstrap : assemblage de l'application (Composition Root).

Ce module construit les services avec leurs dépendances.
C'est ici que l'injection de dépendances est réalisée :
on assemble les composants concrets (ou les fakes pour les tests).

C'est le seul endroit de l'application qui connaît les
implémentations concrètes de chaque abstraction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from boutique.adapters import orm
from boutique.service_layer import query_service, services, unit_of_work


@dataclass
class Services:
    """Ensemble des services exposés aux entrypoints."""

    commandes: services.CommandeService
    produits: services.ProduitService
    produits_query: query_service.ProduitQueryService
    avis: services.AvisService
    cartes_bancaires: services.CarteBancaireService
    lignes_commande: services.LigneCommandeService


def bootstrap(
    start_orm: bool = True,
    uow_factory: Callable[[], unit_of_work.AbstractUnitOfWork] | None = None,
) -> Services:
    """
    Construit et retourne les services configurés.

    En production, utilise la base configurée (dont le schéma est créé
    s'il n'existe pas). En test, on injecte une fabrique de UoW.

    La fabrique est appelée à chaque opération de service : chaque
    requête travaille dans sa propre session.
    """
    if start_orm:
        orm.start_mappers()

    if uow_factory is None:
        orm.metadata.create_all(unit_of_work.DEFAULT_ENGINE)
        uow_factory = unit_of_work.SqlAlchemyUnitOfWork

    return Services(
        commandes=services.CommandeService(uow_factory),
        produits=services.ProduitService(uow_factory),
        produits_query=query_service.ProduitQueryService(uow_factory),
        avis=services.AvisService(uow_factory),
        cartes_bancaires=services.CarteBancaireService(uow_factory),
        lignes_commande=services.LigneCommandeService(uow_factory),
    )
