from app.models import ComponentType, CostComponent


class TestListCostComponents:
    def test_filters_by_type(self, client, user, headers, make_component):
        make_component(user, name="Flour")
        make_component(user, name="Baker", component_type=ComponentType.DIRECT_LABOR)

        response = client.get("/api/cost-components", headers=headers, params={"type": "direct_labor"})

        body = response.json()
        assert [component["name"] for component in body["data"]] == ["Baker"]
        assert body["meta"] == {"total_count": 1, "type": "direct_labor", "keyword": None}

    def test_invalid_type(self, client, headers):
        response = client.get("/api/cost-components", headers=headers, params={"type": "magic"})

        assert response.status_code == 400

    def test_keyword_matches_name_and_description(self, client, user, headers, make_component):
        make_component(user, name="Flour")
        make_component(user, name="Sugar", description="Fine flour blend")
        make_component(user, name="Box")

        body = client.get("/api/cost-components", headers=headers, params={"keyword": "flour"}).json()

        assert sorted(component["name"] for component in body["data"]) == ["Flour", "Sugar"]
        assert body["meta"]["keyword"] == "flour"

    def test_blank_keyword(self, client, headers):
        response = client.get("/api/cost-components", headers=headers, params={"keyword": "  "})

        assert response.status_code == 400

    def test_only_own_components(self, client, user, other_user, headers, make_component):
        make_component(other_user, name="Secret")

        body = client.get("/api/cost-components", headers=headers).json()

        assert body["data"] == []
        assert body["meta"]["total_count"] == 0


class TestCostComponentCrud:
    def test_create(self, client, user, headers):
        response = client.post(
            "/api/cost-components",
            headers=headers,
            json={"name": "Gas", "component_type": "overhead"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["component_type"] == "overhead"
        assert data["user_id"] == user.id

    def test_create_with_unknown_type(self, client, headers):
        response = client.post(
            "/api/cost-components",
            headers=headers,
            json={"name": "Gas", "component_type": "misc"},
        )

        assert response.status_code == 422
        assert "component_type" in response.json()["errors"]

    def test_update(self, client, user, headers, make_component):
        component = make_component(user)

        response = client.put(
            f"/api/cost-components/{component.id}",
            headers=headers,
            json={"component_type": "packaging", "description": "Kraft"},
        )

        data = response.json()["data"]
        assert data["component_type"] == "packaging"
        assert data["description"] == "Kraft"
        assert data["name"] == "Flour"

    def test_foreign_component(self, client, headers, other_user, make_component):
        component = make_component(other_user)

        assert client.get(f"/api/cost-components/{component.id}", headers=headers).status_code == 404

    def test_delete_unused(self, client, session, user, headers, make_component):
        component = make_component(user)

        response = client.delete(f"/api/cost-components/{component.id}", headers=headers)

        assert response.status_code == 200
        assert session.query(CostComponent).count() == 0

    def test_delete_in_use(self, client, session, user, headers, make_product, make_component, make_cost_line):
        component = make_component(user)
        make_cost_line(make_product(user), component, unit_price="10")

        response = client.delete(f"/api/cost-components/{component.id}", headers=headers)

        assert response.status_code == 400
        assert session.query(CostComponent).count() == 1
