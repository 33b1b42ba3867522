"""
Configuration de l'application.

Toutes les valeurs sont lues dans les variables d'environnement,
avec une valeur par défaut adaptée au développement local.
"""

import os


def get_database_uri() -> str:
    return os.environ.get("BOUTIQUE_DATABASE_URI", "sqlite:///boutique.db")


def get_application_name() -> str:
    """Nom de l'application, utilisé comme préfixe des en-têtes d'alerte."""
    return os.environ.get("BOUTIQUE_APP_NAME", "boutique")


def get_log_level() -> str:
    return os.environ.get("BOUTIQUE_LOG_LEVEL", "INFO").upper()
