"""
Erreurs HTTP de l'API.

Toutes les erreurs sont rendues au format application/problem+json.
Les erreurs de validation métier (identifiant manquant, incohérent,
inconnu) portent le nom de l'entité et une clé d'erreur, reprises
dans les en-têtes d'alerte.
"""

from __future__ import annotations

import logging

from flask import Flask, current_app, jsonify
from werkzeug.exceptions import HTTPException

from boutique.domain.criteria import CritereInvalide
from boutique.domain.dto import DTOInvalide
from boutique.entrypoints import headers
from boutique.service_layer.mappers import ReferenceInconnue
from boutique.service_layer.services import EntiteIntrouvable

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


class BadRequestAlertException(Exception):
    """Requête invalide pour une entité donnée (400)."""

    def __init__(self, title: str, entity_name: str, error_key: str):
        super().__init__(title)
        self.title = title
        self.entity_name = entity_name
        self.error_key = error_key


def _problem(corps: dict, status: int, en_têtes: dict | None = None):
    réponse = jsonify({**corps, "status": status})
    réponse.status_code = status
    réponse.mimetype = PROBLEM_JSON
    réponse.headers.extend(en_têtes or {})
    return réponse


def _alert(title: str, entity_name: str, error_key: str):
    logger.warning("Requête refusée (%s) : %s", error_key, title)
    return _problem(
        {
            "title": title,
            "entityName": entity_name,
            "errorKey": error_key,
            "message": f"error.{error_key}",
            "params": entity_name,
        },
        400,
        headers.create_failure_alert(
            current_app.config["APPLICATION_NAME"], entity_name, error_key, title
        ),
    )


def handle_bad_request_alert(e: BadRequestAlertException):
    return _alert(e.title, e.entity_name, e.error_key)


def handle_reference_inconnue(e: ReferenceInconnue):
    return _alert(str(e), e.nom_entité, "idnotfound")


def handle_entite_introuvable(e: EntiteIntrouvable):
    return _problem({"title": "Not Found", "detail": str(e)}, 404)


def handle_validation(e: ValueError):
    logger.warning("Requête invalide : %s", e)
    return _problem(
        {"title": "Bad Request", "detail": str(e), "message": "error.validation"},
        400,
    )


def handle_http_exception(e: HTTPException):
    en_têtes = {}
    if getattr(e, "valid_methods", None):
        # 405 : on conserve la liste des méthodes autorisées
        en_têtes["Allow"] = ", ".join(e.valid_methods)
    return _problem({"title": e.name, "detail": e.description}, e.code or 500, en_têtes)


def register_error_handlers(app: Flask) -> None:
    app.register_error_handler(BadRequestAlertException, handle_bad_request_alert)
    app.register_error_handler(ReferenceInconnue, handle_reference_inconnue)
    app.register_error_handler(EntiteIntrouvable, handle_entite_introuvable)
    app.register_error_handler(DTOInvalide, handle_validation)
    app.register_error_handler(CritereInvalide, handle_validation)
    app.register_error_handler(HTTPException, handle_http_exception)
