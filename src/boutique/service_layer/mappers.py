"""
Mappers entité <-> DTO.

Chaque mapper est sans état et copie les champs un par un :

- to_dto : entité -> DTO, les relations réduites à leur identifiant
- to_entity : DTO -> nouvelle entité, les références résolues via le UoW
- update : remplacement complet, chaque champ est recopié (None compris)
- partial_update : sémantique merge-patch, seuls les champs non nuls
  du DTO écrasent ceux de l'entité
"""

from __future__ import annotations

from typing import Optional

from boutique.domain import dto, model
from boutique.service_layer.unit_of_work import AbstractUnitOfWork


class ReferenceInconnue(Exception):
    """Levée quand un DTO référence une entité qui n'existe pas."""

    def __init__(self, nom_entité: str, id: int):
        super().__init__(f"{nom_entité} inconnu(e) : {id}")
        self.nom_entité = nom_entité
        self.id = id


def _commande(uow: AbstractUnitOfWork, id: Optional[int]) -> Optional[model.Commande]:
    if id is None:
        return None
    commande = uow.commandes.get(id)
    if commande is None:
        raise ReferenceInconnue("commande", id)
    return commande


def _produit(uow: AbstractUnitOfWork, id: Optional[int]) -> Optional[model.Produit]:
    if id is None:
        return None
    produit = uow.produits.get(id)
    if produit is None:
        raise ReferenceInconnue("produit", id)
    return produit


def _id(entité: Optional[model.Entité]) -> Optional[int]:
    return entité.id if entité is not None else None


class CommandeMapper:
    def to_dto(self, commande: model.Commande) -> dto.CommandeDTO:
        return dto.CommandeDTO(
            id=commande.id,
            date_commande=commande.date_commande,
            statut=commande.statut,
            montant_total=commande.montant_total,
        )

    def to_entity(self, commande_dto: dto.CommandeDTO, uow: AbstractUnitOfWork) -> model.Commande:
        return model.Commande(
            id=commande_dto.id,
            date_commande=commande_dto.date_commande,
            statut=commande_dto.statut,
            montant_total=commande_dto.montant_total,
        )

    def update(self, commande: model.Commande, commande_dto: dto.CommandeDTO, uow: AbstractUnitOfWork) -> None:
        commande.date_commande = commande_dto.date_commande
        commande.statut = commande_dto.statut
        commande.montant_total = commande_dto.montant_total

    def partial_update(self, commande: model.Commande, commande_dto: dto.CommandeDTO, uow: AbstractUnitOfWork) -> None:
        if commande_dto.date_commande is not None:
            commande.date_commande = commande_dto.date_commande
        if commande_dto.statut is not None:
            commande.statut = commande_dto.statut
        if commande_dto.montant_total is not None:
            commande.montant_total = commande_dto.montant_total


class ProduitMapper:
    """La relation `commandes` doit être chargée avant to_dto (voir fetch_bag_relationships)."""

    def to_dto(self, produit: model.Produit) -> dto.ProduitDTO:
        return dto.ProduitDTO(
            id=produit.id,
            nom=produit.nom,
            description=produit.description,
            prix=produit.prix,
            quantite=produit.quantite,
            commandes_ids=[commande.id for commande in produit.commandes],
        )

    def to_entity(self, produit_dto: dto.ProduitDTO, uow: AbstractUnitOfWork) -> model.Produit:
        return model.Produit(
            id=produit_dto.id,
            nom=produit_dto.nom,
            description=produit_dto.description,
            prix=produit_dto.prix,
            quantite=produit_dto.quantite,
            commandes=self._commandes(produit_dto, uow),
        )

    def update(self, produit: model.Produit, produit_dto: dto.ProduitDTO, uow: AbstractUnitOfWork) -> None:
        produit.nom = produit_dto.nom
        produit.description = produit_dto.description
        produit.prix = produit_dto.prix
        produit.quantite = produit_dto.quantite
        produit.commandes = self._commandes(produit_dto, uow)

    def partial_update(self, produit: model.Produit, produit_dto: dto.ProduitDTO, uow: AbstractUnitOfWork) -> None:
        if produit_dto.nom is not None:
            produit.nom = produit_dto.nom
        if produit_dto.description is not None:
            produit.description = produit_dto.description
        if produit_dto.prix is not None:
            produit.prix = produit_dto.prix
        if produit_dto.quantite is not None:
            produit.quantite = produit_dto.quantite
        if produit_dto.commandes_ids is not None:
            produit.commandes = self._commandes(produit_dto, uow)

    def _commandes(self, produit_dto: dto.ProduitDTO, uow: AbstractUnitOfWork) -> list[model.Commande]:
        commandes: list[model.Commande] = []
        for id in produit_dto.commandes_ids or []:
            commande = _commande(uow, id)
            if commande not in commandes:
                commandes.append(commande)
        return commandes


class AvisMapper:
    def to_dto(self, avis: model.Avis) -> dto.AvisDTO:
        return dto.AvisDTO(
            id=avis.id,
            note=avis.note,
            commentaire=avis.commentaire,
            date=avis.date,
            produit_id=_id(avis.produit),
        )

    def to_entity(self, avis_dto: dto.AvisDTO, uow: AbstractUnitOfWork) -> model.Avis:
        return model.Avis(
            id=avis_dto.id,
            note=avis_dto.note,
            commentaire=avis_dto.commentaire,
            date=avis_dto.date,
            produit=_produit(uow, avis_dto.produit_id),
        )

    def update(self, avis: model.Avis, avis_dto: dto.AvisDTO, uow: AbstractUnitOfWork) -> None:
        avis.note = avis_dto.note
        avis.commentaire = avis_dto.commentaire
        avis.date = avis_dto.date
        avis.produit = _produit(uow, avis_dto.produit_id)

    def partial_update(self, avis: model.Avis, avis_dto: dto.AvisDTO, uow: AbstractUnitOfWork) -> None:
        if avis_dto.note is not None:
            avis.note = avis_dto.note
        if avis_dto.commentaire is not None:
            avis.commentaire = avis_dto.commentaire
        if avis_dto.date is not None:
            avis.date = avis_dto.date
        if avis_dto.produit_id is not None:
            avis.produit = _produit(uow, avis_dto.produit_id)


class CarteBancaireMapper:
    def to_dto(self, carte: model.CarteBancaire) -> dto.CarteBancaireDTO:
        return dto.CarteBancaireDTO(
            id=carte.id,
            numero_carte=carte.numero_carte,
            nom_titulaire=carte.nom_titulaire,
            date_expiration=carte.date_expiration,
        )

    def to_entity(self, carte_dto: dto.CarteBancaireDTO, uow: AbstractUnitOfWork) -> model.CarteBancaire:
        return model.CarteBancaire(
            id=carte_dto.id,
            numero_carte=carte_dto.numero_carte,
            nom_titulaire=carte_dto.nom_titulaire,
            date_expiration=carte_dto.date_expiration,
        )

    def update(self, carte: model.CarteBancaire, carte_dto: dto.CarteBancaireDTO, uow: AbstractUnitOfWork) -> None:
        carte.numero_carte = carte_dto.numero_carte
        carte.nom_titulaire = carte_dto.nom_titulaire
        carte.date_expiration = carte_dto.date_expiration

    def partial_update(self, carte: model.CarteBancaire, carte_dto: dto.CarteBancaireDTO, uow: AbstractUnitOfWork) -> None:
        if carte_dto.numero_carte is not None:
            carte.numero_carte = carte_dto.numero_carte
        if carte_dto.nom_titulaire is not None:
            carte.nom_titulaire = carte_dto.nom_titulaire
        if carte_dto.date_expiration is not None:
            carte.date_expiration = carte_dto.date_expiration


class LigneCommandeMapper:
    def to_dto(self, ligne: model.LigneCommande) -> dto.LigneCommandeDTO:
        return dto.LigneCommandeDTO(
            id=ligne.id,
            quantite=ligne.quantite,
            prix=ligne.prix,
            commande_id=_id(ligne.commande),
            produit_id=_id(ligne.produit),
        )

    def to_entity(self, ligne_dto: dto.LigneCommandeDTO, uow: AbstractUnitOfWork) -> model.LigneCommande:
        return model.LigneCommande(
            id=ligne_dto.id,
            quantite=ligne_dto.quantite,
            prix=ligne_dto.prix,
            commande=_commande(uow, ligne_dto.commande_id),
            produit=_produit(uow, ligne_dto.produit_id),
        )

    def update(self, ligne: model.LigneCommande, ligne_dto: dto.LigneCommandeDTO, uow: AbstractUnitOfWork) -> None:
        ligne.quantite = ligne_dto.quantite
        ligne.prix = ligne_dto.prix
        ligne.commande = _commande(uow, ligne_dto.commande_id)
        ligne.produit = _produit(uow, ligne_dto.produit_id)

    def partial_update(self, ligne: model.LigneCommande, ligne_dto: dto.LigneCommandeDTO, uow: AbstractUnitOfWork) -> None:
        if ligne_dto.quantite is not None:
            ligne.quantite = ligne_dto.quantite
        if ligne_dto.prix is not None:
            ligne.prix = ligne_dto.prix
        if ligne_dto.commande_id is not None:
            ligne.commande = _commande(uow, ligne_dto.commande_id)
        if ligne_dto.produit_id is not None:
            ligne.produit = _produit(uow, ligne_dto.produit_id)
