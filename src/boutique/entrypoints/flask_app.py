"""
Point d'entrée Flask.

L'API Flask est un thin adapter : elle convertit les requêtes HTTP
en appels de service, et les résultats en réponses HTTP.

L'API ne contient aucune logique métier.

    flask --app boutique.entrypoints.flask_app run
"""

from __future__ import annotations

import logging

from flask import Flask

from boutique import config
from boutique.entrypoints import errors, resources
from boutique.service_layer import bootstrap


def create_app(services: bootstrap.Services | None = None) -> Flask:
    """
    Fabrique de l'application.

    Sans services injectés, assemble ceux de production
    (base configurée par BOUTIQUE_DATABASE_URI).
    """
    logging.basicConfig(
        level=config.get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if services is None:
        services = bootstrap.bootstrap()

    app = Flask(__name__)
    app.config["APPLICATION_NAME"] = config.get_application_name()
    app.register_blueprint(resources.create_blueprint(services))
    errors.register_error_handlers(app)
    return app
