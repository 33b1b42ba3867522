"""
Ressources REST.

Une ressource par entité, toutes construites sur le même gabarit
(CrudResource). Elles se contentent de valider l'identifiant,
d'appeler le service et de choisir le code de statut : aucune
logique métier ici.

    POST   /api/<chemin>          création (201 + Location)
    GET    /api/<chemin>          liste
    GET    /api/<chemin>/<id>     lecture (404 si absente)
    PUT    /api/<chemin>/<id>     remplacement complet
    PATCH  /api/<chemin>/<id>     mise à jour partielle (merge-patch)
    DELETE /api/<chemin>/<id>     suppression (204, idempotente)
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, abort, current_app, jsonify, request

from boutique.domain import dto
from boutique.domain.criteria import ProduitCriteria
from boutique.entrypoints import headers
from boutique.entrypoints.errors import BadRequestAlertException
from boutique.service_layer.bootstrap import Services
from boutique.service_layer.query_service import ProduitQueryService
from boutique.service_layer.services import CrudService

logger = logging.getLogger(__name__)

PATCH_CONTENT_TYPES = ("application/json", "application/merge-patch+json")


def _application_name() -> str:
    return current_app.config["APPLICATION_NAME"]


class CrudResource:
    def __init__(self, entity_name: str, chemin: str, service: CrudService, dto_cls: Any):
        self.entity_name = entity_name
        self.chemin = chemin
        self.service = service
        self.dto_cls = dto_cls

    def register(self, blueprint: Blueprint) -> None:
        collection = f"/{self.chemin}"
        élément = f"/{self.chemin}/<int(max={dto.LONG_MAX}):id>"
        règles = [
            (collection, "create", self.create, "POST"),
            (collection, "get_all", self.get_all, "GET"),
            (élément, "get", self.get, "GET"),
            (élément, "update", self.update, "PUT"),
            (élément, "partial_update", self.partial_update, "PATCH"),
            (élément, "delete", self.delete, "DELETE"),
        ]
        for règle, nom, vue, méthode in règles:
            blueprint.add_url_rule(
                règle,
                endpoint=f"{self.entity_name}_{nom}",
                view_func=vue,
                methods=[méthode],
            )

    def create(self):
        entité_dto = self.dto_cls.from_json(request.get_json())
        logger.debug("Requête REST de création de %s : %s", self.entity_name, entité_dto)
        if entité_dto.id is not None:
            raise BadRequestAlertException(
                f"Une nouvelle entité {self.entity_name} ne peut pas déjà avoir d'ID",
                self.entity_name,
                "idexists",
            )
        résultat = self.service.save(entité_dto)
        en_têtes = {
            "Location": f"/api/{self.chemin}/{résultat.id}",
            **headers.create_entity_creation_alert(
                _application_name(), self.entity_name, str(résultat.id)
            ),
        }
        return jsonify(résultat.to_json()), 201, en_têtes

    def update(self, id: int):
        entité_dto = self.dto_cls.from_json(request.get_json())
        logger.debug("Requête REST de mise à jour de %s : %s, %s", self.entity_name, id, entité_dto)
        self._valider_identifiant(id, entité_dto)
        résultat = self.service.update(entité_dto)
        return jsonify(résultat.to_json()), 200, headers.create_entity_update_alert(
            _application_name(), self.entity_name, str(entité_dto.id)
        )

    def partial_update(self, id: int):
        if request.mimetype not in PATCH_CONTENT_TYPES:
            abort(415)
        entité_dto = self.dto_cls.from_json(request.get_json())
        logger.debug(
            "Requête REST de mise à jour partielle de %s : %s, %s", self.entity_name, id, entité_dto
        )
        self._valider_identifiant(id, entité_dto)
        résultat = self.service.partial_update(entité_dto)
        if résultat is None:
            abort(404)
        return jsonify(résultat.to_json()), 200, headers.create_entity_update_alert(
            _application_name(), self.entity_name, str(entité_dto.id)
        )

    def get_all(self):
        logger.debug("Requête REST de la liste des %s", self.entity_name)
        return jsonify([entité_dto.to_json() for entité_dto in self.service.find_all()])

    def get(self, id: int):
        logger.debug("Requête REST de lecture de %s : %s", self.entity_name, id)
        entité_dto = self.service.find_one(id)
        if entité_dto is None:
            abort(404)
        return jsonify(entité_dto.to_json())

    def delete(self, id: int):
        logger.debug("Requête REST de suppression de %s : %s", self.entity_name, id)
        self.service.delete(id)
        return "", 204, headers.create_entity_deletion_alert(
            _application_name(), self.entity_name, str(id)
        )

    def _valider_identifiant(self, id: int, entité_dto: Any) -> None:
        """Contrôles communs à PUT et PATCH, dans cet ordre : id nul, id incohérent, id inconnu."""
        if entité_dto.id is None:
            raise BadRequestAlertException("Identifiant manquant", self.entity_name, "idnull")
        if entité_dto.id != id:
            raise BadRequestAlertException("Identifiant invalide", self.entity_name, "idinvalid")
        if not self.service.exists(id):
            raise BadRequestAlertException("Entité introuvable", self.entity_name, "idnotfound")


class ProduitResource(CrudResource):
    """Ajoute le filtrage par critères sur la liste, et GET /api/produits/count."""

    def __init__(self, service: CrudService, query_service: ProduitQueryService):
        super().__init__("produit", "produits", service, dto.ProduitDTO)
        self.query_service = query_service

    def register(self, blueprint: Blueprint) -> None:
        super().register(blueprint)
        blueprint.add_url_rule(
            f"/{self.chemin}/count",
            endpoint=f"{self.entity_name}_count",
            view_func=self.count,
            methods=["GET"],
        )

    def get_all(self):
        criteria = ProduitCriteria.from_query_args(request.args)
        logger.debug("Requête REST de la liste des produits par critères : %s", criteria)
        return jsonify(
            [produit_dto.to_json() for produit_dto in self.query_service.find_by_criteria(criteria)]
        )

    def count(self):
        criteria = ProduitCriteria.from_query_args(request.args)
        logger.debug("Requête REST de comptage des produits par critères : %s", criteria)
        return jsonify(self.query_service.count_by_criteria(criteria))


def create_blueprint(services: Services) -> Blueprint:
    api = Blueprint("api", __name__, url_prefix="/api")
    ressources = [
        CrudResource("commande", "commandes", services.commandes, dto.CommandeDTO),
        ProduitResource(services.produits, services.produits_query),
        CrudResource("avis", "avis", services.avis, dto.AvisDTO),
        CrudResource("carteBancaire", "carte-bancaires", services.cartes_bancaires, dto.CarteBancaireDTO),
        CrudResource("ligneCommande", "ligne-commandes", services.lignes_commande, dto.LigneCommandeDTO),
    ]
    for ressource in ressources:
        ressource.register(api)
    return api
