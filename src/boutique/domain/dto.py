"""
Objets de transfert (DTO).

Les DTO sont la représentation stable des entités exposée par l'API HTTP.
Tous les champs sont optionnels : un champ à None est soit absent
de la requête, soit explicitement nul (ce que la sémantique
merge-patch traite de la même façon).

Les relations sont transportées sous forme de références ne portant
que l'identifiant : {"commande": {"id": 3}}.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional


class DTOInvalide(ValueError):
    """Levée quand un corps de requête ne respecte pas la forme attendue."""
    pass


# Bornes des entiers signés stockés en base (INTEGER 32 bits, BIGINT 64 bits)
INT_MIN, INT_MAX = -(2**31), 2**31 - 1
LONG_MIN, LONG_MAX = -(2**63), 2**63 - 1


def dans_les_bornes(valeur: int, minimum: int = LONG_MIN, maximum: int = LONG_MAX) -> bool:
    return minimum <= valeur <= maximum


# --- Lecture des valeurs JSON ---


def _objet(data: Any) -> dict:
    if not isinstance(data, dict):
        raise DTOInvalide("Le corps de la requête doit être un objet JSON")
    return data


def _entier(data: dict, clé: str, minimum: int = LONG_MIN, maximum: int = LONG_MAX) -> Optional[int]:
    valeur = data.get(clé)
    if valeur is None:
        return None
    if isinstance(valeur, bool) or not isinstance(valeur, int):
        raise DTOInvalide(f"'{clé}' doit être un entier")
    if not dans_les_bornes(valeur, minimum, maximum):
        raise DTOInvalide(f"'{clé}' hors des bornes [{minimum}, {maximum}] : {valeur}")
    return valeur


def _décimal(data: dict, clé: str) -> Optional[float]:
    valeur = data.get(clé)
    if valeur is None:
        return None
    if isinstance(valeur, bool) or not isinstance(valeur, (int, float)):
        raise DTOInvalide(f"'{clé}' doit être un nombre")
    return float(valeur)


def _texte(data: dict, clé: str) -> Optional[str]:
    valeur = data.get(clé)
    if valeur is None:
        return None
    if not isinstance(valeur, str):
        raise DTOInvalide(f"'{clé}' doit être une chaîne")
    return valeur


def _horodatage(data: dict, clé: str) -> Optional[datetime]:
    """Lit un horodatage ISO-8601 ; les valeurs avec fuseau sont ramenées en UTC naïf."""
    valeur = _texte(data, clé)
    if valeur is None:
        return None
    try:
        horodatage = datetime.fromisoformat(valeur.replace("Z", "+00:00"))
    except ValueError:
        raise DTOInvalide(f"'{clé}' n'est pas un horodatage ISO-8601 : {valeur}")
    if horodatage.tzinfo is not None:
        horodatage = horodatage.astimezone(timezone.utc).replace(tzinfo=None)
    return horodatage


def _date(data: dict, clé: str) -> Optional[date]:
    valeur = _texte(data, clé)
    if valeur is None:
        return None
    try:
        return date.fromisoformat(valeur)
    except ValueError:
        raise DTOInvalide(f"'{clé}' n'est pas une date ISO-8601 : {valeur}")


def _référence(data: dict, clé: str) -> Optional[int]:
    """Lit une référence {"id": n} et retourne l'identifiant."""
    valeur = data.get(clé)
    if valeur is None:
        return None
    if not isinstance(valeur, dict):
        raise DTOInvalide(f"'{clé}' doit être une référence {{\"id\": ...}}")
    id = _entier(valeur, "id")
    if id is None:
        raise DTOInvalide(f"La référence '{clé}' doit porter un id")
    return id


def _références(data: dict, clé: str) -> Optional[list[int]]:
    valeur = data.get(clé)
    if valeur is None:
        return None
    if not isinstance(valeur, list):
        raise DTOInvalide(f"'{clé}' doit être une liste de références")
    return [_référence({clé: élément}, clé) for élément in valeur]


def _iso(valeur: date | datetime | None) -> Optional[str]:
    return valeur.isoformat() if valeur is not None else None


def _ref(id: Optional[int]) -> Optional[dict]:
    return {"id": id} if id is not None else None


# --- DTO ---


@dataclass
class CommandeDTO:
    id: Optional[int] = None
    date_commande: Optional[datetime] = None
    statut: Optional[str] = None
    montant_total: Optional[float] = None

    @classmethod
    def from_json(cls, data: Any) -> CommandeDTO:
        data = _objet(data)
        return cls(
            id=_entier(data, "id"),
            date_commande=_horodatage(data, "dateCommande"),
            statut=_texte(data, "statut"),
            montant_total=_décimal(data, "montantTotal"),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "dateCommande": _iso(self.date_commande),
            "statut": self.statut,
            "montantTotal": self.montant_total,
        }


@dataclass
class ProduitDTO:
    id: Optional[int] = None
    nom: Optional[str] = None
    description: Optional[str] = None
    prix: Optional[float] = None
    quantite: Optional[int] = None
    commandes_ids: Optional[list[int]] = None

    @classmethod
    def from_json(cls, data: Any) -> ProduitDTO:
        data = _objet(data)
        return cls(
            id=_entier(data, "id"),
            nom=_texte(data, "nom"),
            description=_texte(data, "description"),
            prix=_décimal(data, "prix"),
            quantite=_entier(data, "quantite", INT_MIN, INT_MAX),
            commandes_ids=_références(data, "commandes"),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "nom": self.nom,
            "description": self.description,
            "prix": self.prix,
            "quantite": self.quantite,
            "commandes": [_ref(id) for id in self.commandes_ids or []],
        }


@dataclass
class AvisDTO:
    id: Optional[int] = None
    note: Optional[int] = None
    commentaire: Optional[str] = None
    date: Optional[datetime] = None
    produit_id: Optional[int] = None

    @classmethod
    def from_json(cls, data: Any) -> AvisDTO:
        data = _objet(data)
        return cls(
            id=_entier(data, "id"),
            note=_entier(data, "note", INT_MIN, INT_MAX),
            commentaire=_texte(data, "commentaire"),
            date=_horodatage(data, "date"),
            produit_id=_référence(data, "produit"),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "note": self.note,
            "commentaire": self.commentaire,
            "date": _iso(self.date),
            "produit": _ref(self.produit_id),
        }


@dataclass
class CarteBancaireDTO:
    id: Optional[int] = None
    numero_carte: Optional[str] = None
    nom_titulaire: Optional[str] = None
    date_expiration: Optional[date] = None

    @classmethod
    def from_json(cls, data: Any) -> CarteBancaireDTO:
        data = _objet(data)
        return cls(
            id=_entier(data, "id"),
            numero_carte=_texte(data, "numeroCarte"),
            nom_titulaire=_texte(data, "nomTitulaire"),
            date_expiration=_date(data, "dateExpiration"),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "numeroCarte": self.numero_carte,
            "nomTitulaire": self.nom_titulaire,
            "dateExpiration": _iso(self.date_expiration),
        }


@dataclass
class LigneCommandeDTO:
    id: Optional[int] = None
    quantite: Optional[int] = None
    prix: Optional[float] = None
    commande_id: Optional[int] = None
    produit_id: Optional[int] = None

    @classmethod
    def from_json(cls, data: Any) -> LigneCommandeDTO:
        data = _objet(data)
        return cls(
            id=_entier(data, "id"),
            quantite=_entier(data, "quantite", INT_MIN, INT_MAX),
            prix=_décimal(data, "prix"),
            commande_id=_référence(data, "commande"),
            produit_id=_référence(data, "produit"),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "quantite": self.quantite,
            "prix": self.prix,
            "commande": _ref(self.commande_id),
            "produit": _ref(self.produit_id),
        }
