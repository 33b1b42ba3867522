"""
Recherche de produits par critères.

Le prédicat est construit dynamiquement : chaque opérateur renseigné
d'un filtre produit une clause SQLAlchemy indépendante, et toutes
les clauses sont combinées par un ET logique. Un critère vide
n'impose aucune contrainte.
"""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy import func, not_
from sqlalchemy.sql.elements import ColumnElement

from boutique.domain import dto, model
from boutique.domain.criteria import Filter, ProduitCriteria, StringFilter
from boutique.service_layer import mappers
from boutique.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


def build_specification(filtre: Filter, colonne) -> list[ColumnElement]:
    """Clauses d'un filtre sur une colonne de l'entité."""
    clauses: list[ColumnElement] = []
    if filtre.equals is not None:
        clauses.append(colonne == filtre.equals)
    if filtre.not_equals is not None:
        clauses.append(colonne != filtre.not_equals)
    if filtre.specified is not None:
        clauses.append(colonne.is_not(None) if filtre.specified else colonne.is_(None))
    if filtre.in_ is not None:
        clauses.append(colonne.in_(filtre.in_))
    if filtre.not_in is not None:
        clauses.append(colonne.not_in(filtre.not_in))
    if isinstance(filtre, StringFilter):
        if filtre.contains is not None:
            clauses.append(_like(colonne, filtre.contains))
        if filtre.does_not_contain is not None:
            clauses.append(not_(_like(colonne, filtre.does_not_contain)))
    else:
        clauses.extend(_range_clauses(filtre, lambda condition: condition(colonne)))
    return clauses


def build_join_specification(filtre: Filter, relation, colonne) -> list[ColumnElement]:
    """
    Clauses d'un filtre sur l'identifiant d'une collection jointe.

    Chaque clause est une sous-requête EXISTS (relation.any), ce qui
    évite de dupliquer les lignes de l'entité principale.
    """
    clauses: list[ColumnElement] = []
    if filtre.equals is not None:
        clauses.append(relation.any(colonne == filtre.equals))
    if filtre.not_equals is not None:
        clauses.append(relation.any(colonne != filtre.not_equals))
    if filtre.specified is not None:
        clauses.append(relation.any() if filtre.specified else not_(relation.any()))
    if filtre.in_ is not None:
        clauses.append(relation.any(colonne.in_(filtre.in_)))
    if filtre.not_in is not None:
        clauses.append(relation.any(colonne.not_in(filtre.not_in)))
    clauses.extend(
        _range_clauses(filtre, lambda condition: relation.any(condition(colonne)))
    )
    return clauses


def _range_clauses(filtre: Filter, appliquer: Callable) -> list[ColumnElement]:
    clauses: list[ColumnElement] = []
    if getattr(filtre, "greater_than", None) is not None:
        clauses.append(appliquer(lambda c: c > filtre.greater_than))
    if getattr(filtre, "less_than", None) is not None:
        clauses.append(appliquer(lambda c: c < filtre.less_than))
    if getattr(filtre, "greater_than_or_equal", None) is not None:
        clauses.append(appliquer(lambda c: c >= filtre.greater_than_or_equal))
    if getattr(filtre, "less_than_or_equal", None) is not None:
        clauses.append(appliquer(lambda c: c <= filtre.less_than_or_equal))
    return clauses


def _like(colonne, valeur: str) -> ColumnElement:
    # insensible à la casse ; % et _ sont échappés et cherchés littéralement
    return func.upper(colonne).contains(valeur.upper(), autoescape=True)


class ProduitQueryService:
    """Recherche et comptage des produits par ProduitCriteria."""

    def __init__(self, uow_factory: Callable[[], AbstractUnitOfWork]):
        self.uow_factory = uow_factory
        self.mapper = mappers.ProduitMapper()

    def find_by_criteria(self, criteria: ProduitCriteria) -> list[dto.ProduitDTO]:
        logger.debug("Recherche de Produit par critères : %s", criteria)
        clauses = self._create_specification(criteria)
        with self.uow_factory().lecture_seule() as uow:
            return [
                self.mapper.to_dto(produit)
                for produit in uow.produits.find_by_specification(
                    clauses, distinct=bool(criteria.distinct)
                )
            ]

    def count_by_criteria(self, criteria: ProduitCriteria) -> int:
        logger.debug("Comptage de Produit par critères : %s", criteria)
        clauses = self._create_specification(criteria)
        with self.uow_factory().lecture_seule() as uow:
            return uow.produits.count_by_specification(
                clauses, distinct=bool(criteria.distinct)
            )

    def _create_specification(self, criteria: ProduitCriteria) -> list[ColumnElement]:
        colonnes = {
            "id": model.Produit.id,
            "nom": model.Produit.nom,
            "description": model.Produit.description,
            "prix": model.Produit.prix,
            "quantite": model.Produit.quantite,
        }
        clauses: list[ColumnElement] = []
        for champ, filtre in criteria.filtres():
            if champ == "commandes_id":
                clauses.extend(
                    build_join_specification(
                        filtre, model.Produit.commandes, model.Commande.id
                    )
                )
            else:
                clauses.extend(build_specification(filtre, colonnes[champ]))
        return clauses
