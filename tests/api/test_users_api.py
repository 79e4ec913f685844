class TestUsersApi:
    def test_create_and_read(self, client):
        payload = {
            "id": 20,
            "name": "Pedro López",
            "email": "pedro.lopez@email.com",
            "phone": "+34666000111",
            "address": {
                "number": 50,
                "street": "Calle Mayor",
                "city": "Valencia",
                "province": "Valencia",
                "country": "España",
                "postal_code": "46001",
            },
        }
        resp = client.post("/users", json=payload)

        assert resp.status_code == 200
        assert resp.json()["role"] == "USER"

        resp = client.get("/users/20")
        assert resp.json()["address"]["city"] == "Valencia"

    def test_create_is_idempotent(self, client):
        resp = client.post("/users", json={"id": 3, "name": "Someone Else"})
        assert resp.json()["name"] == "John Doe"

    def test_missing_user(self, client):
        assert client.get("/users/404").status_code == 404

    def test_list_by_role(self, client):
        resp = client.get("/users", params={"role": "MANAGER"})
        assert [u["id"] for u in resp.json()] == [2, 8]

    def test_new_user_gets_a_cart(self, client):
        client.post("/users", json={"id": 21, "name": "Ana", "email": "ana@example.com"})

        resp = client.get("/carts/me", params={"user_id": 21})
        assert resp.status_code == 200
        assert resp.json()["client"]["email"] == "ana@example.com"
