"""
Critères de recherche.

Un critère est un ensemble de filtres optionnels, un par champ
filtrable. Chaque filtre porte ses propres opérateurs (égalité,
intervalle, inclusion, contenance) ; un opérateur laissé à None
n'impose aucune contrainte.

Côté HTTP, les filtres arrivent dans la query string sous la forme
`<champ>.<opérateur>=<valeur>`, par exemple :

    GET /api/produits?nom.contains=lampe&quantite.greaterThan=3&id.in=1,2
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from boutique.domain.dto import INT_MAX, INT_MIN, LONG_MAX, LONG_MIN, dans_les_bornes

T = TypeVar("T")


class CritereInvalide(ValueError):
    """Levée quand une valeur de filtre ne peut pas être interprétée."""
    pass


@dataclass
class Filter(Generic[T]):
    equals: Optional[T] = None
    not_equals: Optional[T] = None
    specified: Optional[bool] = None
    in_: Optional[list[T]] = None
    not_in: Optional[list[T]] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass
class RangeFilter(Filter[T]):
    greater_than: Optional[T] = None
    less_than: Optional[T] = None
    greater_than_or_equal: Optional[T] = None
    less_than_or_equal: Optional[T] = None


@dataclass
class StringFilter(Filter[str]):
    contains: Optional[str] = None
    does_not_contain: Optional[str] = None


# Nom de l'opérateur dans la query string -> attribut du filtre
OPÉRATEURS = {
    "equals": "equals",
    "notEquals": "not_equals",
    "specified": "specified",
    "in": "in_",
    "notIn": "not_in",
    "greaterThan": "greater_than",
    "lessThan": "less_than",
    "greaterThanOrEqual": "greater_than_or_equal",
    "lessThanOrEqual": "less_than_or_equal",
    "contains": "contains",
    "doesNotContain": "does_not_contain",
}

OPÉRATEURS_LISTE = {"in_", "not_in"}


def _booléen(valeur: str) -> bool:
    if valeur.lower() in ("true", "1"):
        return True
    if valeur.lower() in ("false", "0"):
        return False
    raise ValueError(valeur)


def _entier(minimum: int, maximum: int) -> Callable[[str], int]:
    """Convertisseur de query string vers un entier borné."""

    def convertir(valeur: str) -> int:
        entier = int(valeur)
        if not dans_les_bornes(entier, minimum, maximum):
            raise ValueError(valeur)
        return entier

    return convertir


def _parse_filter(
    filtre_cls: type[Filter],
    convertir: Callable[[str], Any],
    préfixe: str,
    args: Any,
) -> Optional[Filter]:
    """
    Construit un filtre à partir des paramètres `<préfixe>.<opérateur>`.

    `args` est un MultiDict (request.args) ou un simple dict.
    Retourne None si aucun opérateur n'est renseigné pour ce champ.
    """
    valeurs: dict[str, Any] = {}
    attributs = {f.name for f in fields(filtre_cls)}
    for nom, attribut in OPÉRATEURS.items():
        clé = f"{préfixe}.{nom}"
        if clé not in args or attribut not in attributs:
            continue
        brutes = args.getlist(clé) if hasattr(args, "getlist") else [args[clé]]
        try:
            if attribut == "specified":
                valeurs[attribut] = _booléen(brutes[-1])
            elif attribut in OPÉRATEURS_LISTE:
                valeurs[attribut] = [
                    convertir(morceau.strip())
                    for brute in brutes
                    for morceau in brute.split(",")
                    if morceau.strip()
                ]
            else:
                valeurs[attribut] = convertir(brutes[-1])
        except ValueError:
            raise CritereInvalide(f"Valeur invalide pour '{clé}' : {brutes[-1]}")
    if not valeurs:
        return None
    return filtre_cls(**valeurs)


@dataclass
class ProduitCriteria:
    """Critères de filtrage des produits (GET /api/produits et /count)."""

    id: Optional[RangeFilter[int]] = None
    nom: Optional[StringFilter] = None
    description: Optional[StringFilter] = None
    prix: Optional[RangeFilter[float]] = None
    quantite: Optional[RangeFilter[int]] = None
    commandes_id: Optional[RangeFilter[int]] = None
    distinct: Optional[bool] = None

    @classmethod
    def from_query_args(cls, args: Any) -> ProduitCriteria:
        distinct = args.get("distinct")
        try:
            distinct = _booléen(distinct) if distinct is not None else None
        except ValueError:
            raise CritereInvalide(f"Valeur invalide pour 'distinct' : {distinct}")
        return cls(
            id=_parse_filter(RangeFilter, _entier(LONG_MIN, LONG_MAX), "id", args),
            nom=_parse_filter(StringFilter, str, "nom", args),
            description=_parse_filter(StringFilter, str, "description", args),
            prix=_parse_filter(RangeFilter, float, "prix", args),
            quantite=_parse_filter(RangeFilter, _entier(INT_MIN, INT_MAX), "quantite", args),
            commandes_id=_parse_filter(RangeFilter, _entier(LONG_MIN, LONG_MAX), "commandesId", args),
            distinct=distinct,
        )

    def filtres(self) -> Iterable[tuple[str, Filter]]:
        """Itère sur les (champ, filtre) renseignés."""
        for f in fields(self):
            valeur = getattr(self, f.name)
            if isinstance(valeur, Filter) and not valeur.is_empty():
                yield f.name, valeur
