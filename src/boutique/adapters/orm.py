"""
Mapping ORM avec SQLAlchemy (classical mapping).

On définit les tables séparément, puis on mappe les classes
du domaine sur ces tables. Le modèle de domaine reste ainsi
ignorant de la persistance.

Les noms de tables et de colonnes suivent la convention snake_case
du schéma ; l'association many-to-many Produit <-> Commande est
portée par la table rel_produit__commandes.
"""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
)
from sqlalchemy.orm import registry, relationship

from boutique.domain import model

metadata = MetaData()
mapper_registry = registry(metadata=metadata)

# --- Définition des tables ---

commande = Table(
    "commande",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("date_commande", DateTime, nullable=True),
    Column("statut", String(255), nullable=True),
    Column("montant_total", Float, nullable=True),
)

produit = Table(
    "produit",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("nom", String(255), nullable=True),
    Column("description", String(255), nullable=True),
    Column("prix", Float, nullable=True),
    Column("quantite", Integer, nullable=True),
)

rel_produit__commandes = Table(
    "rel_produit__commandes",
    metadata,
    Column("produit_id", Integer, ForeignKey("produit.id"), primary_key=True),
    Column("commandes_id", Integer, ForeignKey("commande.id"), primary_key=True),
)

avis = Table(
    "avis",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("note", Integer, nullable=True),
    Column("commentaire", String(255), nullable=True),
    Column("date", DateTime, nullable=True),
    Column("produit_id", Integer, ForeignKey("produit.id"), nullable=True),
)

carte_bancaire = Table(
    "carte_bancaire",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("numero_carte", String(255), nullable=True),
    Column("nom_titulaire", String(255), nullable=True),
    Column("date_expiration", Date, nullable=True),
)

ligne_commande = Table(
    "ligne_commande",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("quantite", Integer, nullable=True),
    Column("prix", Float, nullable=True),
    Column("commande_id", Integer, ForeignKey("commande.id"), nullable=True),
    Column("produit_id", Integer, ForeignKey("produit.id"), nullable=True),
)

_mappers_démarrés = False


def start_mappers() -> None:
    """
    Configure le mapping entre les classes du domaine et les tables SQL.

    Idempotent : l'application et la suite de tests peuvent l'appeler
    chacune de leur côté.
    """
    global _mappers_démarrés
    if _mappers_démarrés:
        return

    commande_mapper = mapper_registry.map_imperatively(model.Commande, commande)
    produit_mapper = mapper_registry.map_imperatively(
        model.Produit,
        produit,
        properties={
            # Chargement paresseux : les lectures passent par
            # fetch_bag_relationships pour charger les commandes d'un coup.
            "commandes": relationship(
                commande_mapper,
                secondary=rel_produit__commandes,
                backref="produits",
                order_by=commande.c.id,
            ),
        },
    )
    mapper_registry.map_imperatively(
        model.Avis,
        avis,
        properties={"produit": relationship(produit_mapper)},
    )
    mapper_registry.map_imperatively(model.CarteBancaire, carte_bancaire)
    mapper_registry.map_imperatively(
        model.LigneCommande,
        ligne_commande,
        properties={
            "commande": relationship(commande_mapper),
            "produit": relationship(produit_mapper),
        },
    )
    _mappers_démarrés = True
