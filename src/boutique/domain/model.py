"""
Modèle de domaine de la boutique.

Les entités sont de simples enregistrements : un identifiant généré
par la base, quelques champs scalaires et des relations vers les
autres entités. Elles ne connaissent pas SQLAlchemy : le mapping
est déclaré à part, dans adapters/orm.py.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional


class Entité:
    """
    Base commune des entités.

    L'égalité repose sur l'identité (classe + id), pas sur les attributs.
    Une entité pas encore persistée (id None) n'est égale qu'à elle-même.
    """

    id: Optional[int]

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return False
        return self.id is not None and self.id == other.id

    def __hash__(self) -> int:
        # Une entité transitoire ne doit pas rester dans un set pendant sa
        # persistance : son hash passe de l'identité de l'objet à son id.
        if self.id is None:
            return id(self)
        return hash((type(self).__name__, self.id))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


class Commande(Entité):
    def __init__(
        self,
        id: Optional[int] = None,
        date_commande: Optional[datetime] = None,
        statut: Optional[str] = None,
        montant_total: Optional[float] = None,
    ):
        self.id = id
        self.date_commande = date_commande
        self.statut = statut
        self.montant_total = montant_total


class Produit(Entité):
    """
    Produit du catalogue.

    `commandes` est une association many-to-many chargée à la demande
    (« bag ») : voir AbstractProduitRepository.fetch_bag_relationships.
    """

    def __init__(
        self,
        id: Optional[int] = None,
        nom: Optional[str] = None,
        description: Optional[str] = None,
        prix: Optional[float] = None,
        quantite: Optional[int] = None,
        commandes: Optional[list[Commande]] = None,
    ):
        self.id = id
        self.nom = nom
        self.description = description
        self.prix = prix
        self.quantite = quantite
        self.commandes = commandes or []


class Avis(Entité):
    def __init__(
        self,
        id: Optional[int] = None,
        note: Optional[int] = None,
        commentaire: Optional[str] = None,
        date: Optional[datetime] = None,
        produit: Optional[Produit] = None,
    ):
        self.id = id
        self.note = note
        self.commentaire = commentaire
        self.date = date
        self.produit = produit


class CarteBancaire(Entité):
    def __init__(
        self,
        id: Optional[int] = None,
        numero_carte: Optional[str] = None,
        nom_titulaire: Optional[str] = None,
        date_expiration: Optional[date] = None,
    ):
        self.id = id
        self.numero_carte = numero_carte
        self.nom_titulaire = nom_titulaire
        self.date_expiration = date_expiration


class LigneCommande(Entité):
    """Ligne d'une commande : un produit, une quantité et un prix."""

    def __init__(
        self,
        id: Optional[int] = None,
        quantite: Optional[int] = None,
        prix: Optional[float] = None,
        commande: Optional[Commande] = None,
        produit: Optional[Produit] = None,
    ):
        self.id = id
        self.quantite = quantite
        self.prix = prix
        self.commande = commande
        self.produit = produit
