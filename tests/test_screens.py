import json

import httpx

from couture.auth import SESSION_COOKIE_NAME, read_session_token
from couture.routers import caisse_semaine

CUSTOMERS = [{"id": 1, "name": "Awa Diop", "phoneNumber": "771234567", "hasMeasures": False}]
MODELES = [{"id": 1, "price": 5000, "imageUrl": "https://img/1.png"}, {"id": 2, "price": 3000}]
USER = {"id": 3, "name": "Moussa Fall", "userName": "moussa", "email": "moussa@atelier.sn", "role": "Admin"}


def _body(request):
    return json.loads(request.content)


# ---- Session ----

def test_protected_page_redirects_to_login(client, backend):
    response = client.get("/dashboard/clients", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert backend.calls == []

def test_unknown_path_redirects_to_login(client):
    response = client.get("/nulle-part", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"

def test_login_page_renders(client, backend):
    response = client.get("/login")
    assert response.status_code == 200
    assert 'name="emailOrUsername"' in response.text
    assert backend.calls == []

def test_blank_password_makes_no_network_call(client, backend):
    response = client.post("/login", data={"emailOrUsername": "moussa", "password": ""})
    assert response.status_code == 400
    assert "Le mot de passe est requis" in response.text
    assert backend.calls == []

def test_successful_login_sets_session(client, backend):
    backend.on("POST", "/auth/login", {"success": True, "message": "Connexion réussie", "user": USER})
    response = client.post("/login", data={"emailOrUsername": "moussa", "password": "secret"},
                           follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    assert _body(backend.last("POST", "/auth/login")) == {"emailOrUsername": "moussa", "password": "secret"}
    user = read_session_token(response.cookies.get(SESSION_COOKIE_NAME))
    assert user.userName == "moussa"
    assert user.is_admin

def test_failed_login_shows_backend_message(client, backend):
    backend.on("POST", "/auth/login", {"success": False, "message": "Identifiants invalides"}, status=401)
    response = client.post("/login", data={"emailOrUsername": "moussa", "password": "faux"})
    assert response.status_code == 401
    assert "Identifiants invalides" in response.text
    assert SESSION_COOKIE_NAME not in response.cookies

def test_logout_clears_session(logged_client):
    response = logged_client.post("/logout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert SESSION_COOKIE_NAME in response.headers.get("set-cookie", "")


# ---- Clients ----

def test_client_list_renders(logged_client, backend):
    backend.on("GET", "/customers", CUSTOMERS)
    response = logged_client.get("/dashboard/clients")
    assert response.status_code == 200
    assert "Awa Diop" in response.text
    assert "modal d-block" not in response.text

def test_client_create_reloads_list_once(logged_client, backend):
    backend.on("GET", "/customers", CUSTOMERS)
    backend.on("POST", "/customers", {"id": 2, "name": "Fatou Sow", "phoneNumber": "781234567"})

    response = logged_client.post("/dashboard/clients", data={"name": "Fatou Sow", "phoneNumber": "781234567"},
                                  follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"].startswith("/dashboard/clients?succes=")
    assert backend.count("POST", "/customers") == 1
    assert backend.count("GET", "/customers") == 0

    page = logged_client.get(response.headers["location"])
    assert "Client créé" in page.text
    assert "modal d-block" not in page.text
    assert backend.count("GET", "/customers") == 1

def test_client_create_failure_keeps_modal_open(logged_client, backend):
    backend.on("GET", "/customers", CUSTOMERS)
    backend.on("POST", "/customers", {"message": "Ce numéro existe déjà"}, status=400)

    response = logged_client.post("/dashboard/clients", data={"name": "Fatou Sow", "phoneNumber": "781234567"})
    assert response.status_code == 200
    assert "modal d-block" in response.text
    assert "Ce numéro existe déjà" in response.text
    assert 'value="Fatou Sow"' in response.text

def test_backend_field_errors_are_listed(logged_client, backend):
    backend.on("GET", "/customers", CUSTOMERS)
    backend.on("POST", "/customers", {"message": "Données invalides", "errors": {"Name": ["trop court"]}}, status=400)

    response = logged_client.post("/dashboard/clients", data={"name": "Fa", "phoneNumber": "781234567"})
    assert "Données invalides" in response.text
    assert "Name: trop court" in response.text

def test_client_local_validation_blocks_submit(logged_client, backend):
    backend.on("GET", "/customers", CUSTOMERS)
    response = logged_client.post("/dashboard/clients", data={"name": "", "phoneNumber": "781234567"})
    assert "Le nom est requis" in response.text
    assert backend.count("POST", "/customers") == 0

def test_client_delete_redirects_with_message(logged_client, backend):
    backend.on("DELETE", "/customers/1", {"success": True})
    response = logged_client.post("/dashboard/clients/1/delete", follow_redirects=False)
    assert response.status_code == 303
    assert backend.count("DELETE", "/customers/1") == 1

def test_client_delete_failure_is_reported(logged_client, backend):
    backend.on("GET", "/customers", CUSTOMERS)
    backend.on("DELETE", "/customers/1", {"message": "Client lié à des commandes"}, status=409)
    page = logged_client.post("/dashboard/clients/1/delete")
    assert "Client lié à des commandes" in page.text
    assert "Awa Diop" in page.text

def test_measure_out_of_range_is_not_sent(logged_client, backend):
    backend.on("GET", "/customers", CUSTOMERS)
    response = logged_client.post("/dashboard/clients/1/mesures", data={"tourPoitrine": "301"})
    assert "Tour de poitrine doit être entre 0 et 300 cm" in response.text
    assert backend.count("POST", "/customers/1/measures") == 0

def test_nan_measure_is_not_sent(logged_client, backend):
    backend.on("GET", "/customers", CUSTOMERS)
    response = logged_client.post("/dashboard/clients/1/mesures", data={"tourPoitrine": "nan"})
    assert response.status_code == 200
    assert "Tour de poitrine doit être un nombre" in response.text
    assert backend.count("POST", "/customers/1/measures") == 0

def test_measures_upsert(logged_client, backend):
    backend.on("POST", "/customers/1/measures", {"id": 9, "customerId": 1, "tourPoitrine": 300})
    response = logged_client.post("/dashboard/clients/1/mesures", data={"tourPoitrine": "300", "tourCou": ""},
                                  follow_redirects=False)
    assert response.status_code == 303
    body = _body(backend.last("POST", "/customers/1/measures"))
    assert body["customerId"] == 1
    assert body["tourPoitrine"] == 300
    assert body["tourCou"] is None


# ---- Modèles ----

def test_modele_create_requires_image(logged_client, backend):
    backend.on("GET", "/modeles", MODELES)
    response = logged_client.post("/dashboard/modeles", data={"price": "5000"})
    assert "Une image est requise" in response.text
    assert backend.count("POST", "/modeles") == 0

def test_modele_create_sends_multipart(logged_client, backend):
    backend.on("POST", "/modeles", {"id": 3, "price": 7500, "imageUrl": "https://img/3.png"})
    response = logged_client.post(
        "/dashboard/modeles",
        data={"price": "7500"},
        files={"image": ("boubou.png", b"\x89PNG-data", "image/png")},
        follow_redirects=False,
    )
    assert response.status_code == 303
    request = backend.last("POST", "/modeles")
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="Price"' in request.content
    assert b'name="ImageFile"' in request.content


def test_modele_large_price_is_sent_without_exponent(logged_client, backend):
    backend.on("POST", "/modeles", {"id": 4, "price": 1500000, "imageUrl": "https://img/4.png"})
    response = logged_client.post(
        "/dashboard/modeles",
        data={"price": "1500000"},
        files={"image": ("grand-boubou.png", b"\x89PNG-data", "image/png")},
        follow_redirects=False,
    )
    assert response.status_code == 303
    content = backend.last("POST", "/modeles").content
    assert b"1500000" in content
    assert b"e+06" not in content

def test_modele_edit_form_keeps_full_price(logged_client, backend):
    backend.on("GET", "/modeles", MODELES)
    backend.on("GET", "/modeles/5", {"id": 5, "price": 1234567, "imageUrl": "https://img/5.png"})
    response = logged_client.get("/dashboard/modeles?edit=5")
    assert 'value="1234567"' in response.text

# ---- Commandes ----

def _order_form(**overrides):
    data = {
        "customerId": "1", "dateCommande": "2025-03-07", "statut": "En cours",
        "items-0-modeleId": "1", "items-0-typeTissu": "wax", "items-0-couleur": "bleu", "items-0-quantite": "2",
        "items-1-modeleId": "2", "items-1-typeTissu": "bazin", "items-1-couleur": "blanc", "items-1-quantite": "1",
        "action": "save",
    }
    data.update(overrides)
    return data

def _order_backend(backend):
    backend.on("GET", "/orders", [])
    backend.on("GET", "/customers", CUSTOMERS)
    backend.on("GET", "/modeles", MODELES)

def test_order_reduction_above_total_is_blocked(logged_client, backend):
    _order_backend(backend)
    response = logged_client.post("/dashboard/commandes", data=_order_form(hasReduction="on", reduction="14000"))
    assert "La réduction ne peut pas être supérieure au total" in response.text
    assert backend.count("POST", "/orders") == 0

def test_order_save_reports_unavailable_catalogue(logged_client, backend):
    backend.on("GET", "/orders", [])
    backend.on("GET", "/customers", CUSTOMERS)
    backend.on("GET", "/modeles", {"message": "Catalogue indisponible"}, status=503)
    response = logged_client.post("/dashboard/commandes", data=_order_form(hasReduction="on", reduction="1000"))
    assert "Catalogue indisponible" in response.text
    assert "La réduction ne peut pas être supérieure au total" not in response.text
    assert "modal d-block" in response.text
    assert backend.count("POST", "/orders") == 0

def test_order_preview_shows_totals(logged_client, backend):
    _order_backend(backend)
    backend.on("POST", "/orders/calculate-total", {"total": 13000})
    backend.on("POST", "/orders/calculate-final-total", {"finalTotal": 9000})
    response = logged_client.post("/dashboard/commandes",
                                  data=_order_form(hasReduction="on", reduction="4000", action="preview"))
    assert "13 000 CFA" in response.text
    assert "9 000 CFA" in response.text
    assert backend.count("POST", "/orders") == 0

def test_order_add_line_keeps_values(logged_client, backend):
    _order_backend(backend)
    response = logged_client.post("/dashboard/commandes", data=_order_form(action="add_item"))
    assert 'name="items-2-modeleId"' in response.text
    assert backend.count("POST", "/orders") == 0

def test_order_create(logged_client, backend):
    _order_backend(backend)
    backend.on("POST", "/orders", {"id": 11})
    response = logged_client.post("/dashboard/commandes", data=_order_form(), follow_redirects=False)
    assert response.status_code == 303
    payload = _body(backend.last("POST", "/orders"))
    assert payload["customerId"] == 1
    assert len(payload["orderItems"]) == 2
    assert "reduction" not in payload

def test_order_status_quick_update(logged_client, backend):
    backend.on("PATCH", "/orders/3/status", {"success": True})
    response = logged_client.post("/dashboard/commandes/3/statut", data={"statut": "Livré"}, follow_redirects=False)
    assert response.status_code == 303
    assert _body(backend.last("PATCH", "/orders/3/status")) == {"status": "Livré"}

def test_order_unknown_status_is_rejected(logged_client, backend):
    response = logged_client.post("/dashboard/commandes/3/statut", data={"statut": "Perdu"}, follow_redirects=False)
    assert response.status_code == 303
    assert "erreur=" in response.headers["location"]
    assert backend.calls == []


# ---- Caisse ----

TRANSACTIONS = [
    {"id": 1, "montant": 10000, "type": "ENTREE", "description": "Vente boubou",
     "dateTransaction": "2025-03-03T09:00:00", "montantAvecSigne": 10000},
    {"id": 2, "montant": 2500, "type": "SORTIE", "description": "Fil",
     "dateTransaction": "2025-03-05T09:00:00", "montantAvecSigne": -2500},
]

def test_transaction_requires_montant_and_description(logged_client, backend):
    backend.on("GET", "/transactions", TRANSACTIONS)
    response = logged_client.post("/dashboard/caisse", data={"type": "ENTREE", "montant": "", "description": ""})
    assert "Le montant est requis" in response.text
    assert "La description est requise" in response.text
    assert backend.count("POST", "/transactions") == 0

def test_transaction_edit_form_keeps_full_amount(logged_client, backend):
    backend.on("GET", "/transactions", TRANSACTIONS)
    backend.on("GET", "/transactions/8", {"id": 8, "montant": 1234567, "type": "ENTREE", "description": "Trousseau",
                                          "dateTransaction": "2025-03-07T10:00:00"})
    response = logged_client.get("/dashboard/caisse?edit=8")
    assert 'value="1234567"' in response.text

def test_caisse_page_shows_statistics(logged_client, backend):
    backend.on("GET", "/transactions", TRANSACTIONS)
    backend.on("GET", "/transactions/statistiques", {"totalEntrees": 10000, "totalSorties": 2500, "solde": 7500,
                                                     "nombreTransactions": 2})
    backend.on("GET", "/transactions/categories", ["Couture sur mesure"])
    response = logged_client.get("/dashboard/caisse")
    assert response.status_code == 200
    assert "+7 500 CFA" in response.text
    assert "Couture sur mesure" in response.text
    assert "-2 500 CFA" in response.text

def test_weekly_ledger_groups_transactions(logged_client, backend):
    backend.on("GET", "/transactions", TRANSACTIONS)
    response = logged_client.get("/dashboard/caisse-par-semaine?dateDebut=2025-03-01&dateFin=2025-03-31")
    assert response.status_code == 200
    assert "Semaine 10 - 2025" in response.text
    assert "+7 500 CFA" in response.text
    params = backend.last("GET", "/transactions").url.params
    assert params["dateDebut"] == "2025-03-01"


def test_weekly_ledger_reads_every_page(logged_client, backend):
    page_size = caisse_semaine.PAGE_SIZE_PERIODE
    first_page = [
        {"id": i, "montant": 100, "type": "ENTREE", "description": "Retouche",
         "dateTransaction": "2025-03-03T09:00:00", "montantAvecSigne": 100}
        for i in range(1, page_size + 1)
    ]

    def transactions(request):
        page = int(request.url.params["page"])
        return httpx.Response(200, json=first_page if page == 1 else [TRANSACTIONS[1]])

    backend.on("GET", "/transactions", transactions)
    response = logged_client.get("/dashboard/caisse-par-semaine?dateDebut=2025-03-01&dateFin=2025-03-31")
    assert backend.count("GET", "/transactions") == 2
    assert [r.url.params["page"] for r in backend.calls] == ["1", "2"]
    # 500 x 100 en entrée, 2 500 en sortie
    assert "+47 500 CFA" in response.text

def test_weekly_ledger_page_failure_shows_no_partial_totals(logged_client, backend):
    backend.on("GET", "/transactions", {"message": "Base indisponible"}, status=503)
    response = logged_client.get("/dashboard/caisse-par-semaine?dateDebut=2025-03-01&dateFin=2025-03-31")
    assert response.status_code == 200
    assert "Base indisponible" in response.text
    assert "Semaine 10 - 2025" not in response.text

# ---- Calendrier ----

def test_calendar_lists_appointments(logged_client, backend):
    backend.on("GET", "/orders/appointments", [
        {"id": 5, "customerId": 1, "customerName": "Awa Diop", "dateCommande": "2025-03-01T00:00:00",
         "dateRendezVous": "2025-03-12T10:00:00", "statut": "En cours"},
    ])
    response = logged_client.get("/dashboard/calendrier?vue=list&annee=2025&mois=3")
    assert "RDV - Awa Diop" in response.text
    assert "12 mars 2025" in response.text


# ---- Utilisateurs ----

def test_users_page_is_admin_only(logged_client, backend):
    response = logged_client.get("/dashboard/utilisateurs")
    assert response.status_code == 403
    assert "Accès réservé aux administrateurs" in response.text
    assert backend.calls == []

def test_admin_sees_users(admin_client, backend):
    backend.on("GET", "/users", {"success": True, "users": [USER], "totalCount": 1})
    response = admin_client.get("/dashboard/utilisateurs?search=mou")
    assert "Moussa Fall" in response.text
    assert backend.last("GET", "/users").url.params["search"] == "mou"

def test_user_creation_checks_existing_email(admin_client, backend):
    backend.on("GET", "/users", {"success": True, "users": [], "totalCount": 0})
    backend.on("GET", "/users/check-email/moussa@atelier.sn", {"exists": True})
    backend.on("GET", "/users/check-username/moussa2", {"exists": False})
    response = admin_client.post("/dashboard/utilisateurs", data={
        "name": "Moussa", "userName": "moussa2", "email": "moussa@atelier.sn",
        "password": "secret1", "role": "User", "status": "on",
    })
    assert "Cet email est déjà utilisé" in response.text
    assert backend.count("POST", "/users") == 0
    assert "secret1" not in response.text

def test_admin_cannot_delete_own_account(admin_client, backend):
    response = admin_client.post("/dashboard/utilisateurs/7/delete", follow_redirects=False)
    assert response.status_code == 303
    assert backend.calls == []


# ---- Profil ----

def test_profile_refreshes_session(logged_client, backend):
    backend.on("GET", "/users/me", {"success": True, "user": {"id": 1, "name": "Awa Ndiaye", "userName": "awa",
                                                              "email": "awa@atelier.sn", "role": "User"}})
    response = logged_client.get("/dashboard/profil")
    assert "Awa Ndiaye" in response.text
    assert backend.last("GET", "/users/me").url.params["userId"] == "1"
    assert read_session_token(response.cookies.get(SESSION_COOKIE_NAME)).name == "Awa Ndiaye"

def test_password_change_mismatch(logged_client, backend):
    backend.on("GET", "/users/me", {"success": True, "user": {"id": 1, "userName": "awa"}})
    response = logged_client.post("/dashboard/profil/mot-de-passe", data={
        "currentPassword": "ancien", "newPassword": "nouveau1", "confirmPassword": "autre",
    })
    assert response.status_code == 400
    assert "Les mots de passe ne correspondent pas" in response.text
    assert backend.count("PUT", "/users/1/change-password") == 0
