"""
Services applicatifs.

Un service par entité, tous construits sur le même gabarit (CrudService) :
chaque appel ouvre son propre Unit of Work (donc sa propre transaction), délègue la persistance au repository et la
conversion au mapper. Les écritures sont validées par commit(),
les lectures se font dans une transaction en lecture seule.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from boutique.adapters.repository import AbstractRepository
from boutique.domain import dto
from boutique.service_layer import mappers
from boutique.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

D = TypeVar("D")


class EntiteIntrouvable(Exception):
    """Levée quand une mise à jour complète vise un identifiant inexistant."""
    pass


class CrudService(Generic[D]):
    """
    Gabarit des services CRUD.

    Les sous-classes fixent le nom de l'entité (pour les logs)
    et le nom du repository à utiliser sur le Unit of Work.

    `uow_factory` fournit un Unit of Work neuf à chaque appel : deux
    requêtes concurrentes ne partagent jamais la même session.
    """

    nom_entité: str
    nom_repository: str

    def __init__(self, uow_factory: Callable[[], AbstractUnitOfWork], mapper: Any):
        self.uow_factory = uow_factory
        self.mapper = mapper

    def _repository(self, uow: AbstractUnitOfWork) -> AbstractRepository:
        return getattr(uow, self.nom_repository)

    def save(self, entité_dto: D) -> D:
        """Crée une entité et retourne sa représentation persistée."""
        logger.debug("Demande de création de %s : %s", self.nom_entité, entité_dto)
        with self.uow_factory() as uow:
            entité = self.mapper.to_entity(entité_dto, uow)
            self._repository(uow).add(entité)
            résultat = self.mapper.to_dto(entité)
            uow.commit()
        return résultat

    def update(self, entité_dto: D) -> D:
        """Remplace tous les champs d'une entité existante."""
        logger.debug("Demande de mise à jour de %s : %s", self.nom_entité, entité_dto)
        with self.uow_factory() as uow:
            entité = self._repository(uow).get(entité_dto.id)
            if entité is None:
                raise EntiteIntrouvable(f"{self.nom_entité} introuvable : {entité_dto.id}")
            self.mapper.update(entité, entité_dto, uow)
            résultat = self.mapper.to_dto(entité)
            uow.commit()
        return résultat

    def partial_update(self, entité_dto: D) -> Optional[D]:
        """
        Met à jour les seuls champs renseignés du DTO.

        Retourne None si l'entité n'existe pas.
        """
        logger.debug("Demande de mise à jour partielle de %s : %s", self.nom_entité, entité_dto)
        with self.uow_factory() as uow:
            entité = self._repository(uow).get(entité_dto.id)
            if entité is None:
                return None
            self.mapper.partial_update(entité, entité_dto, uow)
            résultat = self.mapper.to_dto(entité)
            uow.commit()
        return résultat

    def find_all(self) -> list[D]:
        logger.debug("Demande de la liste des %s", self.nom_entité)
        with self.uow_factory().lecture_seule() as uow:
            return [self.mapper.to_dto(entité) for entité in self._repository(uow).list()]

    def find_one(self, id: int) -> Optional[D]:
        logger.debug("Demande de %s : %s", self.nom_entité, id)
        with self.uow_factory().lecture_seule() as uow:
            entité = self._repository(uow).get(id)
            return self.mapper.to_dto(entité) if entité is not None else None

    def exists(self, id: int) -> bool:
        with self.uow_factory().lecture_seule() as uow:
            return self._repository(uow).exists(id)

    def delete(self, id: int) -> None:
        """Supprime l'entité ; sans effet si elle n'existe pas."""
        logger.debug("Demande de suppression de %s : %s", self.nom_entité, id)
        with self.uow_factory() as uow:
            self._repository(uow).delete(id)
            uow.commit()


class CommandeService(CrudService[dto.CommandeDTO]):
    nom_entité = "Commande"
    nom_repository = "commandes"

    def __init__(self, uow_factory: Callable[[], AbstractUnitOfWork]):
        super().__init__(uow_factory, mappers.CommandeMapper())


class ProduitService(CrudService[dto.ProduitDTO]):
    """Les lectures chargent l'association `commandes` en une fois."""

    nom_entité = "Produit"
    nom_repository = "produits"

    def __init__(self, uow_factory: Callable[[], AbstractUnitOfWork]):
        super().__init__(uow_factory, mappers.ProduitMapper())

    def find_all(self) -> list[dto.ProduitDTO]:
        logger.debug("Demande de la liste des %s", self.nom_entité)
        with self.uow_factory().lecture_seule() as uow:
            return [
                self.mapper.to_dto(produit)
                for produit in uow.produits.list_with_eager_relationships()
            ]

    def find_one(self, id: int) -> Optional[dto.ProduitDTO]:
        logger.debug("Demande de %s : %s", self.nom_entité, id)
        with self.uow_factory().lecture_seule() as uow:
            produit = uow.produits.get_with_eager_relationships(id)
            return self.mapper.to_dto(produit) if produit is not None else None


class AvisService(CrudService[dto.AvisDTO]):
    nom_entité = "Avis"
    nom_repository = "avis"

    def __init__(self, uow_factory: Callable[[], AbstractUnitOfWork]):
        super().__init__(uow_factory, mappers.AvisMapper())


class CarteBancaireService(CrudService[dto.CarteBancaireDTO]):
    nom_entité = "CarteBancaire"
    nom_repository = "cartes_bancaires"

    def __init__(self, uow_factory: Callable[[], AbstractUnitOfWork]):
        super().__init__(uow_factory, mappers.CarteBancaireMapper())


class LigneCommandeService(CrudService[dto.LigneCommandeDTO]):
    nom_entité = "LigneCommande"
    nom_repository = "lignes_commande"

    def __init__(self, uow_factory: Callable[[], AbstractUnitOfWork]):
        super().__init__(uow_factory, mappers.LigneCommandeMapper())
