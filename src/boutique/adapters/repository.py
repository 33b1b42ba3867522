"""
Pattern Repository.

Le repository fournit une abstraction sur la couche de persistance.
Il expose une interface de type collection (add, get, list, delete)
qui masque les détails de l'accès aux données.

Un repository par entité ; le repository des produits ajoute
le chargement de l'association many-to-many `commandes` et
l'exécution de prédicats construits dynamiquement.
"""

from __future__ import annotations

import abc
from typing import Generic, Optional, Sequence, TypeVar

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.elements import ColumnElement

from boutique.domain import model

E = TypeVar("E", bound=model.Entité)


class AbstractRepository(abc.ABC, Generic[E]):
    """
    Interface abstraite du repository.

    Pattern Template Method : les méthodes publiques portent le
    comportement commun, les sous-classes implémentent les méthodes
    abstraites préfixées _.
    """

    def add(self, entité: E) -> E:
        """Ajoute une entité ; son identifiant est attribué au retour."""
        self._add(entité)
        return entité

    def get(self, id: int) -> Optional[E]:
        return self._get(id)

    def list(self) -> list[E]:
        return self._list()

    def exists(self, id: int) -> bool:
        return self._get(id) is not None

    def delete(self, id: int) -> None:
        """Supprime l'entité d'identifiant donné ; sans effet si elle n'existe pas."""
        entité = self._get(id)
        if entité is not None:
            self._delete(entité)

    @abc.abstractmethod
    def _add(self, entité: E) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, id: int) -> Optional[E]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self) -> list[E]:
        raise NotImplementedError

    @abc.abstractmethod
    def _delete(self, entité: E) -> None:
        raise NotImplementedError


class AbstractProduitRepository(AbstractRepository[model.Produit]):
    """
    Repository des produits.

    L'association `commandes` (many-to-many, « bag ») n'est pas chargée
    par défaut. Les lectures complètes passent par fetch_bag_relationships,
    qui la charge en une seule requête et garantit qu'un produit
    n'apparaît qu'une fois dans le résultat.
    """

    def get_with_eager_relationships(self, id: int) -> Optional[model.Produit]:
        produit = self.get(id)
        if produit is None:
            return None
        return self.fetch_bag_relationships([produit])[0]

    def list_with_eager_relationships(self) -> list[model.Produit]:
        return self.fetch_bag_relationships(self.list())

    def fetch_bag_relationships(
        self, produits: Sequence[model.Produit]
    ) -> list[model.Produit]:
        """
        Charge `commandes` pour chaque produit.

        Le résultat conserve l'ordre d'entrée ; les doublons (même id)
        sont éliminés, seule la première occurrence est gardée.
        """
        ids: list[int] = []
        for produit in produits:
            if produit.id not in ids:
                ids.append(produit.id)
        if not ids:
            return []
        chargés = {p.id: p for p in self._fetch_bag_relationships(ids)}
        return [chargés[id] for id in ids if id in chargés]

    @abc.abstractmethod
    def _fetch_bag_relationships(self, ids: list[int]) -> list[model.Produit]:
        raise NotImplementedError

    @abc.abstractmethod
    def find_by_specification(
        self, clauses: list[ColumnElement], distinct: bool = False
    ) -> list[model.Produit]:
        raise NotImplementedError

    @abc.abstractmethod
    def count_by_specification(
        self, clauses: list[ColumnElement], distinct: bool = False
    ) -> int:
        raise NotImplementedError


class SqlAlchemyRepository(AbstractRepository[E]):
    """Implémentation concrète du repository avec SQLAlchemy, pour une classe d'entité."""

    def __init__(self, session: Session, entité_cls: type[E]):
        self.session = session
        self.entité_cls = entité_cls

    def _add(self, entité: E) -> None:
        self.session.add(entité)
        # flush pour obtenir l'id généré sans clore la transaction
        self.session.flush()

    def _get(self, id: int) -> Optional[E]:
        return self.session.get(self.entité_cls, id)

    def _list(self) -> list[E]:
        return list(
            self.session.scalars(
                select(self.entité_cls).order_by(self.entité_cls.id)
            )
        )

    def _delete(self, entité: E) -> None:
        self.session.delete(entité)
        self.session.flush()


class SqlAlchemyProduitRepository(
    SqlAlchemyRepository[model.Produit], AbstractProduitRepository
):
    def __init__(self, session: Session):
        super().__init__(session, model.Produit)

    def _fetch_bag_relationships(self, ids: list[int]) -> list[model.Produit]:
        # selectinload : une requête IN séparée pour les commandes,
        # sans jointure qui multiplierait les lignes produit.
        return list(
            self.session.scalars(
                select(model.Produit)
                .where(model.Produit.id.in_(ids))
                .options(selectinload(model.Produit.commandes))
                .execution_options(populate_existing=True)
            )
        )

    def find_by_specification(
        self, clauses: list[ColumnElement], distinct: bool = False
    ) -> list[model.Produit]:
        requête = (
            select(model.Produit)
            .where(and_(True, *clauses))
            .options(selectinload(model.Produit.commandes))
            .order_by(model.Produit.id)
        )
        if distinct:
            requête = requête.distinct()
        return list(self.session.scalars(requête))

    def count_by_specification(
        self, clauses: list[ColumnElement], distinct: bool = False
    ) -> int:
        colonne = model.Produit.id
        compte = func.count(colonne.distinct() if distinct else colonne)
        return self.session.scalar(
            select(compte).select_from(model.Produit).where(and_(True, *clauses))
        )
