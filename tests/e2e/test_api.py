"""
Tests end-to-end de l'API Flask.

Ces tests vérifient le flux complet :
HTTP request → Flask → Service → Unit of Work → Repository → SQLite

On utilise le test client Flask avec une base SQLite en mémoire,
ce qui donne des tests rapides tout en couvrant toute la chaîne.
"""

import json
import logging

import pytest

from boutique.entrypoints.flask_app import create_app
from boutique.service_layer import bootstrap

LIGNES = "/api/ligne-commandes"
MERGE_PATCH = "application/merge-patch+json"

DEFAULT_QUANTITE = 0
UPDATED_QUANTITE = 1
DEFAULT_PRIX = 0.0
UPDATED_PRIX = 1.0


@pytest.fixture
def client(sqlite_uow_factory):
    """Client de test Flask, services câblés sur SQLite en mémoire."""
    app = create_app(bootstrap.bootstrap(start_orm=False, uow_factory=sqlite_uow_factory))
    app.config["TESTING"] = True
    app.config["APPLICATION_NAME"] = "boutique"

    with app.test_client() as client:
        yield client


def patch(client, url: str, corps: dict, content_type: str = MERGE_PATCH):
    return client.patch(url, data=json.dumps(corps), content_type=content_type)


def nombre(client, url: str) -> int:
    return len(client.get(url).get_json())


@pytest.fixture
def ligne(client) -> dict:
    """Une ligne de commande persistée avec les valeurs par défaut."""
    réponse = client.post(LIGNES, json={"quantite": DEFAULT_QUANTITE, "prix": DEFAULT_PRIX})
    return réponse.get_json()


class TestCréation:
    def test_créer_une_ligne_de_commande(self, client):
        avant = nombre(client, LIGNES)

        réponse = client.post(LIGNES, json={"quantite": DEFAULT_QUANTITE, "prix": DEFAULT_PRIX})

        assert réponse.status_code == 201
        créée = réponse.get_json()
        assert créée["quantite"] == DEFAULT_QUANTITE
        assert créée["prix"] == DEFAULT_PRIX
        assert réponse.headers["Location"].endswith(f"/api/ligne-commandes/{créée['id']}")
        assert réponse.headers["X-boutique-alert"] == "boutique.ligneCommande.created"
        assert réponse.headers["X-boutique-params"] == str(créée["id"])
        assert nombre(client, LIGNES) == avant + 1

    def test_créer_avec_un_id_existant(self, client, ligne):
        avant = nombre(client, LIGNES)

        réponse = client.post(LIGNES, json={"id": ligne["id"], "quantite": 1, "prix": 1.0})

        assert réponse.status_code == 400
        assert réponse.mimetype == "application/problem+json"
        assert réponse.get_json()["errorKey"] == "idexists"
        assert réponse.get_json()["entityName"] == "ligneCommande"
        assert réponse.headers["X-boutique-error"] == "error.idexists"
        assert nombre(client, LIGNES) == avant

    def test_corps_invalide(self, client):
        réponse = client.post(LIGNES, json={"quantite": "beaucoup"})

        assert réponse.status_code == 400
        assert réponse.get_json()["message"] == "error.validation"

    def test_json_malformé(self, client):
        réponse = client.post(LIGNES, data="{", content_type="application/json")
        assert réponse.status_code == 400

    def test_refus_journalisé_une_seule_fois(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="boutique"):
            client.post(LIGNES, json={"id": 1, "quantite": DEFAULT_QUANTITE})

        refus = [
            r for r in caplog.records
            if r.name.startswith("boutique") and r.levelno >= logging.WARNING
        ]
        assert [r.levelname for r in refus] == ["WARNING"]

    def test_entier_hors_bornes(self, client):
        avant = nombre(client, LIGNES)

        réponse = client.post(LIGNES, json={"quantite": 2**70, "prix": DEFAULT_PRIX})

        assert réponse.status_code == 400
        assert réponse.get_json()["message"] == "error.validation"
        assert nombre(client, LIGNES) == avant


class TestLecture:
    def test_lister(self, client, ligne):
        réponse = client.get(LIGNES)

        assert réponse.status_code == 200
        assert ligne["id"] in [l["id"] for l in réponse.get_json()]

    def test_lire_une_ligne_de_commande(self, client, ligne):
        réponse = client.get(f"{LIGNES}/{ligne['id']}")

        assert réponse.status_code == 200
        assert réponse.get_json() == {
            "id": ligne["id"],
            "quantite": DEFAULT_QUANTITE,
            "prix": DEFAULT_PRIX,
            "commande": None,
            "produit": None,
        }

    def test_lire_une_ligne_inexistante(self, client):
        réponse = client.get(f"{LIGNES}/999999")

        assert réponse.status_code == 404
        assert réponse.get_json()["status"] == 404

    def test_id_hors_bornes_dans_le_chemin(self, client):
        assert client.get(f"{LIGNES}/{2**70}").status_code == 404


class TestRemplacement:
    def test_remplacer(self, client, ligne):
        réponse = client.put(f"{LIGNES}/{ligne['id']}", json={
            "id": ligne["id"], "quantite": UPDATED_QUANTITE, "prix": UPDATED_PRIX,
        })

        assert réponse.status_code == 200
        assert réponse.get_json()["quantite"] == UPDATED_QUANTITE
        assert réponse.get_json()["prix"] == UPDATED_PRIX
        assert réponse.headers["X-boutique-alert"] == "boutique.ligneCommande.updated"
        relue = client.get(f"{LIGNES}/{ligne['id']}").get_json()
        assert relue["quantite"] == UPDATED_QUANTITE

    def test_remplacer_un_id_inexistant(self, client, ligne):
        avant = nombre(client, LIGNES)

        réponse = client.put(f"{LIGNES}/999999", json={"id": 999999, "quantite": 1})

        assert réponse.status_code == 400
        assert réponse.get_json()["errorKey"] == "idnotfound"
        assert nombre(client, LIGNES) == avant

    def test_remplacer_avec_des_id_différents(self, client, ligne):
        réponse = client.put(f"{LIGNES}/{ligne['id'] + 1}", json={"id": ligne["id"], "quantite": 1})

        assert réponse.status_code == 400
        assert réponse.get_json()["errorKey"] == "idinvalid"

    def test_remplacer_sans_id_dans_le_corps(self, client, ligne):
        réponse = client.put(f"{LIGNES}/{ligne['id']}", json={"quantite": 1})

        assert réponse.status_code == 400
        assert réponse.get_json()["errorKey"] == "idnull"

    def test_remplacer_sans_id_dans_le_chemin(self, client, ligne):
        réponse = client.put(LIGNES, json={"id": ligne["id"], "quantite": 1})
        assert réponse.status_code == 405


class TestMiseÀJourPartielle:
    def test_seuls_les_champs_présents_changent(self, client, ligne):
        réponse = patch(client, f"{LIGNES}/{ligne['id']}", {
            "id": ligne["id"], "quantite": UPDATED_QUANTITE,
        })

        assert réponse.status_code == 200
        assert réponse.get_json()["quantite"] == UPDATED_QUANTITE
        assert réponse.get_json()["prix"] == DEFAULT_PRIX

    def test_tous_les_champs(self, client, ligne):
        réponse = patch(client, f"{LIGNES}/{ligne['id']}", {
            "id": ligne["id"], "quantite": UPDATED_QUANTITE, "prix": UPDATED_PRIX,
        })

        assert réponse.status_code == 200
        relue = client.get(f"{LIGNES}/{ligne['id']}").get_json()
        assert relue["quantite"] == UPDATED_QUANTITE
        assert relue["prix"] == UPDATED_PRIX

    def test_content_type_json_accepté(self, client, ligne):
        réponse = patch(
            client, f"{LIGNES}/{ligne['id']}", {"id": ligne["id"], "prix": 3.5},
            content_type="application/json",
        )
        assert réponse.status_code == 200

    def test_content_type_non_supporté(self, client, ligne):
        réponse = client.patch(
            f"{LIGNES}/{ligne['id']}", data="quantite=1", content_type="text/plain"
        )
        assert réponse.status_code == 415

    def test_id_inexistant(self, client):
        réponse = patch(client, f"{LIGNES}/999999", {"id": 999999, "quantite": 1})

        assert réponse.status_code == 400
        assert réponse.get_json()["errorKey"] == "idnotfound"

    def test_id_différents(self, client, ligne):
        réponse = patch(client, f"{LIGNES}/{ligne['id'] + 1}", {"id": ligne["id"]})
        assert réponse.status_code == 400

    def test_sans_id_dans_le_chemin(self, client, ligne):
        réponse = patch(client, LIGNES, {"id": ligne["id"], "quantite": 1})
        assert réponse.status_code == 405


class TestSuppression:
    def test_supprimer(self, client, ligne):
        avant = nombre(client, LIGNES)

        réponse = client.delete(f"{LIGNES}/{ligne['id']}")

        assert réponse.status_code == 204
        assert réponse.headers["X-boutique-alert"] == "boutique.ligneCommande.deleted"
        assert nombre(client, LIGNES) == avant - 1

    def test_supprimer_un_id_inexistant(self, client):
        assert client.delete(f"{LIGNES}/999999").status_code == 204


class TestRelations:
    def test_ligne_de_commande_avec_références(self, client):
        commande = client.post("/api/commandes", json={"statut": "EN_COURS"}).get_json()
        produit = client.post("/api/produits", json={"nom": "Lampe", "prix": 19.9}).get_json()

        réponse = client.post(LIGNES, json={
            "quantite": 2,
            "prix": 39.8,
            "commande": {"id": commande["id"]},
            "produit": {"id": produit["id"]},
        })

        assert réponse.status_code == 201
        assert réponse.get_json()["commande"] == {"id": commande["id"]}
        assert réponse.get_json()["produit"] == {"id": produit["id"]}

    def test_référence_inconnue(self, client):
        réponse = client.post("/api/avis", json={"note": 3, "produit": {"id": 999}})

        assert réponse.status_code == 400
        assert réponse.get_json()["errorKey"] == "idnotfound"
        assert réponse.get_json()["entityName"] == "produit"


@pytest.mark.parametrize("chemin, entité, corps, champ, valeur", [
    ("/api/commandes", "commande",
     {"dateCommande": "2023-11-09T03:25:00", "statut": "EN_COURS", "montantTotal": 42.0},
     "statut", "LIVREE"),
    ("/api/avis", "avis",
     {"note": 2, "commentaire": "Lilangeni", "date": "2023-11-09T03:25:00"},
     "note", 5),
    ("/api/carte-bancaires", "carteBancaire",
     {"numeroCarte": "4970101234567890", "nomTitulaire": "Jeanne Martin", "dateExpiration": "2027-03-31"},
     "nomTitulaire", "J. Martin"),
])
class TestAutresEntités:
    def test_cycle_de_vie(self, client, chemin, entité, corps, champ, valeur):
        créée = client.post(chemin, json=corps)
        assert créée.status_code == 201
        assert créée.headers["X-boutique-alert"] == f"boutique.{entité}.created"
        id = créée.get_json()["id"]
        assert {k: créée.get_json()[k] for k in corps} == corps

        modifiée = patch(client, f"{chemin}/{id}", {"id": id, champ: valeur})
        assert modifiée.status_code == 200
        attendu = {**corps, champ: valeur}
        assert {k: modifiée.get_json()[k] for k in corps} == attendu

        assert client.get(f"{chemin}/{id}").get_json()[champ] == valeur
        assert client.delete(f"{chemin}/{id}").status_code == 204
        assert client.get(f"{chemin}/{id}").status_code == 404

    def test_créer_avec_un_id(self, client, chemin, entité, corps, champ, valeur):
        réponse = client.post(chemin, json={**corps, "id": 1})

        assert réponse.status_code == 400
        assert réponse.headers["X-boutique-params"] == entité


class TestProduits:
    @pytest.fixture
    def catalogue(self, client):
        commande = client.post("/api/commandes", json={"statut": "EN_COURS"}).get_json()
        lampe = client.post("/api/produits", json={
            "nom": "Lampe", "prix": 19.9, "quantite": 5, "commandes": [{"id": commande["id"]}],
        }).get_json()
        chaise = client.post("/api/produits", json={
            "nom": "Chaise", "prix": 45.0, "quantite": 12,
        }).get_json()
        return {"commande": commande, "lampe": lampe, "chaise": chaise}

    def test_lire_un_produit_avec_ses_commandes(self, client, catalogue):
        réponse = client.get(f"/api/produits/{catalogue['lampe']['id']}")

        assert réponse.status_code == 200
        assert réponse.get_json()["commandes"] == [{"id": catalogue["commande"]["id"]}]

    def test_lister_sans_critère(self, client, catalogue):
        assert [p["nom"] for p in client.get("/api/produits").get_json()] == ["Lampe", "Chaise"]

    def test_lister_par_critères(self, client, catalogue):
        réponse = client.get("/api/produits?nom.contains=lam&quantite.lessThan=10")

        assert réponse.status_code == 200
        assert [p["nom"] for p in réponse.get_json()] == ["Lampe"]

    def test_filtrer_par_commande(self, client, catalogue):
        réponse = client.get(f"/api/produits?commandesId.equals={catalogue['commande']['id']}")
        assert [p["id"] for p in réponse.get_json()] == [catalogue["lampe"]["id"]]

    def test_compter(self, client, catalogue):
        assert client.get("/api/produits/count").get_json() == 2
        assert client.get("/api/produits/count?quantite.greaterThan=10").get_json() == 1

    def test_critère_invalide(self, client, catalogue):
        réponse = client.get("/api/produits?quantite.equals=beaucoup")
        assert réponse.status_code == 400

    def test_critère_hors_bornes(self, client, catalogue):
        assert client.get(f"/api/produits?id.equals={2**70}").status_code == 400
        assert client.get(f"/api/produits/count?quantite.greaterThan={2**31}").status_code == 400

    def test_contains_cherche_les_jokers_littéralement(self, client, catalogue):
        assert client.get("/api/produits?nom.contains=%25").get_json() == []
        assert client.get("/api/produits/count?nom.contains=_").get_json() == 0

    def test_patch_sans_commandes_conserve_l_association(self, client, catalogue):
        lampe = catalogue["lampe"]

        réponse = patch(client, f"/api/produits/{lampe['id']}", {"id": lampe["id"], "prix": 24.9})

        assert réponse.get_json()["prix"] == 24.9
        assert réponse.get_json()["commandes"] == lampe["commandes"]

    def test_put_remplace_les_commandes(self, client, catalogue):
        lampe = catalogue["lampe"]

        réponse = client.put(f"/api/produits/{lampe['id']}", json={"id": lampe["id"], "nom": "Lampe"})

        assert réponse.status_code == 200
        assert réponse.get_json()["commandes"] == []
        assert réponse.get_json()["prix"] is None
