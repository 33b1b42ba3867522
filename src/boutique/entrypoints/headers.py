"""
En-têtes d'alerte des réponses HTTP.

Le client lit `X-<app>-alert` (clé de message à traduire) ou
`X-<app>-error`, accompagnés de `X-<app>-params`.
"""

from __future__ import annotations

from urllib.parse import quote


def create_alert(application_name: str, message: str, param: str) -> dict[str, str]:
    return {
        f"X-{application_name}-alert": message,
        f"X-{application_name}-params": quote(param),
    }


def create_entity_creation_alert(application_name: str, entity_name: str, param: str) -> dict[str, str]:
    return create_alert(application_name, f"{application_name}.{entity_name}.created", param)


def create_entity_update_alert(application_name: str, entity_name: str, param: str) -> dict[str, str]:
    return create_alert(application_name, f"{application_name}.{entity_name}.updated", param)


def create_entity_deletion_alert(application_name: str, entity_name: str, param: str) -> dict[str, str]:
    return create_alert(application_name, f"{application_name}.{entity_name}.deleted", param)


def create_failure_alert(
    application_name: str, entity_name: str, error_key: str, default_message: str
) -> dict[str, str]:
    return {
        f"X-{application_name}-error": f"error.{error_key}",
        f"X-{application_name}-params": entity_name,
    }
