from decimal import Decimal

from app.models import PriceScheme, Product


def _three_level_chain(make_product, make_level, owner):
    product = make_product(owner, hpp="100.00")
    levels = [
        make_level(product, level_order=1, purchase="100.00", selling="111.11", discount="10", name="Distributor"),
        make_level(product, level_order=2, purchase="111.11", selling="116.96", discount="5", name="Agent"),
        make_level(product, level_order=3, purchase="116.96", selling="146.20", discount="20", name="Reseller"),
    ]
    return product, levels


class TestCreatePriceScheme:
    def test_first_level_buys_at_hpp(self, client, session, user, headers, make_product):
        product = make_product(user, hpp="100.00")

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "Distributor", "discount_percentage": 10},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Price scheme saved"
        assert body["data"]["level_order"] == 1
        assert body["data"]["purchase_price"] == 100.0
        assert body["data"]["selling_price"] == 111.11
        assert body["data"]["profit_amount"] == 11.11
        assert body["product"]["selling_price"] == 111.11
        assert session.get(Product, product.id).selling_price == Decimal("111.11")

    def test_next_level_buys_at_previous_selling_price(self, client, user, headers, make_product, make_level):
        product = make_product(user, hpp="100.00")
        make_level(product, level_order=1, purchase="100.00", selling="120.00", discount="16.67")

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "Agent", "discount_percentage": 5},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["level_order"] == 2
        assert data["purchase_price"] == 120.0
        assert data["selling_price"] == 126.32
        assert data["profit_amount"] == 6.32

    def test_selling_price_back_derives_discount(self, client, user, headers, make_product):
        product = make_product(user, hpp="120.00")

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "Retail", "selling_price": 150},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["discount_percentage"] == 20.0
        assert data["profit_amount"] == 30.0

    def test_hpp_wins_over_purchase_price_on_first_level(self, client, user, headers, make_product):
        product = make_product(user, hpp="100.00")

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "Distributor", "purchase_price": 500},
        )

        assert response.json()["data"]["purchase_price"] == 100.0

    def test_first_level_without_hpp_uses_purchase_price(self, client, user, headers, make_product):
        product = make_product(user)

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "Distributor", "purchase_price": 200},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["purchase_price"] == 200.0
        assert data["selling_price"] == 200.0
        assert data["discount_percentage"] == 0.0

    def test_first_level_without_hpp_or_purchase_price(self, client, session, user, headers, make_product):
        product = make_product(user)

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "Distributor", "discount_percentage": 10},
        )

        assert response.status_code == 422
        assert "purchase_price" in response.json()["errors"]
        assert session.query(PriceScheme).count() == 0

    def test_discount_must_be_below_hundred(self, client, user, headers, make_product):
        product = make_product(user, hpp="100.00")

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "Broken", "discount_percentage": 100},
        )

        assert response.status_code == 422
        assert "discount_percentage" in response.json()["errors"]

    def test_blank_level_name_is_rejected(self, client, user, headers, make_product):
        product = make_product(user, hpp="100.00")

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "   "},
        )

        assert response.status_code == 422
        assert "level_name" in response.json()["errors"]

    def test_foreign_product_is_not_found(self, client, headers, other_user, make_product):
        foreign = make_product(other_user, hpp="100.00")

        response = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": foreign.id, "level_name": "Distributor"},
        )

        assert response.status_code == 404


class TestListPriceSchemes:
    def test_without_products(self, client, headers):
        response = client.get("/api/price-schemes", headers=headers)

        assert response.status_code == 200
        assert response.json()["success"] is False

    def test_levels_are_ordered(self, client, user, headers, make_product, make_level):
        product, _ = _three_level_chain(make_product, make_level, user)

        response = client.get("/api/price-schemes", headers=headers, params={"product_id": product.id})

        body = response.json()
        assert body["success"] is True
        assert [level["level_order"] for level in body["data"]] == [1, 2, 3]
        assert body["product"]["id"] == product.id


class TestUpdatePriceScheme:
    def test_changing_discount_cascades_down_the_chain(self, client, session, user, headers, make_product,
                                                       make_level):
        product, levels = _three_level_chain(make_product, make_level, user)

        response = client.put(
            f"/api/price-schemes/{levels[0].id}",
            headers=headers,
            json={"discount_percentage": 20},
        )

        assert response.status_code == 200
        assert response.json()["data"]["selling_price"] == 125.0

        chain = session.query(PriceScheme).filter_by(product_id=product.id).order_by(PriceScheme.level_order).all()
        assert [level.purchase_price for level in chain] == [Decimal("100.00"), Decimal("125.00"), Decimal("131.58")]
        assert [level.selling_price for level in chain] == [Decimal("125.00"), Decimal("131.58"), Decimal("164.48")]
        assert [level.discount_percentage for level in chain] == [Decimal("20.00"), Decimal("5.00"), Decimal("20.00")]
        assert session.get(Product, product.id).selling_price == Decimal("164.48")

    def test_selling_price_edit_on_middle_level(self, client, session, user, headers, make_product, make_level):
        product, levels = _three_level_chain(make_product, make_level, user)

        response = client.put(
            f"/api/price-schemes/{levels[1].id}",
            headers=headers,
            json={"selling_price": 138.89},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["purchase_price"] == 111.11
        assert data["discount_percentage"] == 20.0

        last = session.get(PriceScheme, levels[2].id)
        assert last.purchase_price == Decimal("138.89")
        assert last.selling_price == Decimal("173.61")

    def test_rename_keeps_prices(self, client, user, headers, make_product, make_level):
        _, levels = _three_level_chain(make_product, make_level, user)

        response = client.put(f"/api/price-schemes/{levels[2].id}", headers=headers, json={"level_name": "Shop"})

        data = response.json()["data"]
        assert data["level_name"] == "Shop"
        assert data["selling_price"] == 146.2
        assert data["discount_percentage"] == 20.0

    def test_rename_keeps_irregular_selling_price(self, client, session, user, headers, make_product):
        product = make_product(user, hpp="100.00")
        first = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "A", "selling_price": 123.45},
        ).json()["data"]
        second = client.post(
            "/api/price-schemes",
            headers=headers,
            json={"product_id": product.id, "level_name": "Next", "discount_percentage": 5},
        ).json()["data"]

        response = client.put(f"/api/price-schemes/{first['id']}", headers=headers, json={"level_name": "B"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["level_name"] == "B"
        assert data["selling_price"] == 123.45
        assert data["discount_percentage"] == 19.0
        assert session.get(PriceScheme, second["id"]).selling_price == Decimal("129.95")
        assert session.get(Product, product.id).selling_price == Decimal("129.95")

    def test_purchase_price_is_ignored_when_hpp_exists(self, client, user, headers, make_product, make_level):
        product = make_product(user, hpp="100.00")
        level = make_level(product, level_order=1, purchase="100.00", selling="120.00", discount="16.67")

        response = client.put(f"/api/price-schemes/{level.id}", headers=headers, json={"purchase_price": 110})

        data = response.json()["data"]
        assert data["purchase_price"] == 100.0
        assert data["selling_price"] == 120.0
        assert data["discount_percentage"] == 16.67

    def test_new_purchase_price_keeps_selling_price(self, client, user, headers, make_product, make_level):
        product = make_product(user)
        level = make_level(product, level_order=1, purchase="100.00", selling="120.00", discount="16.67")

        response = client.put(f"/api/price-schemes/{level.id}", headers=headers, json={"purchase_price": 110})

        data = response.json()["data"]
        assert data["purchase_price"] == 110.0
        assert data["selling_price"] == 120.0
        assert data["discount_percentage"] == 8.33

    def test_failed_update_leaves_level_untouched(self, client, session, user, headers, make_product, make_level):
        product = make_product(user, hpp="0.00")
        level = make_level(product, level_order=1, purchase="0.00", selling="0.00", discount="10", name="Free")

        response = client.put(
            f"/api/price-schemes/{level.id}",
            headers=headers,
            json={"level_name": "Paid", "selling_price": 50},
        )

        assert response.status_code == 422
        stored = session.get(PriceScheme, level.id)
        assert stored.level_name == "Free"
        assert (stored.purchase_price, stored.selling_price) == (Decimal("0.00"), Decimal("0.00"))
        assert stored.discount_percentage == Decimal("10.00")
        assert session.get(Product, product.id).selling_price == Decimal("0.00")

    def test_foreign_scheme_is_not_found(self, client, headers, other_user, make_product, make_level):
        _, levels = _three_level_chain(make_product, make_level, other_user)

        response = client.put(f"/api/price-schemes/{levels[0].id}", headers=headers, json={"discount_percentage": 1})

        assert response.status_code == 404


class TestDeletePriceScheme:
    def test_deleting_middle_level_renumbers_and_reprices(self, client, session, user, headers, make_product,
                                                          make_level):
        product, levels = _three_level_chain(make_product, make_level, user)

        response = client.delete(f"/api/price-schemes/{levels[1].id}", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert [level["level_order"] for level in body["data"]] == [1, 2]
        assert [level["level_name"] for level in body["data"]] == ["Distributor", "Reseller"]
        assert body["data"][1]["purchase_price"] == 111.11
        assert body["data"][1]["selling_price"] == 138.89
        assert body["product"]["selling_price"] == 138.89
        assert session.get(Product, product.id).selling_price == Decimal("138.89")

    def test_deleting_first_level_anchors_successor_at_hpp(self, client, user, headers, make_product, make_level):
        _, levels = _three_level_chain(make_product, make_level, user)

        response = client.delete(f"/api/price-schemes/{levels[0].id}", headers=headers)

        data = response.json()["data"]
        assert data[0]["level_name"] == "Agent"
        assert data[0]["level_order"] == 1
        assert data[0]["purchase_price"] == 100.0
        assert data[0]["selling_price"] == 105.26

    def test_deleting_only_level_resets_selling_price_to_hpp(self, client, session, user, headers, make_product,
                                                             make_level):
        product = make_product(user, hpp="100.00")
        level = make_level(product, level_order=1, purchase="100.00", selling="111.11", discount="10")

        response = client.delete(f"/api/price-schemes/{level.id}", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"] == []
        assert session.get(Product, product.id).selling_price == Decimal("100.00")

    def test_missing_scheme(self, client, headers):
        assert client.delete("/api/price-schemes/999", headers=headers).status_code == 404
