from conftest import ADMIN_PASSWORD

CREATE_FORM = {
    "sender_name": "Li Wei",
    "sender_country": "China",
    "recipient_name": "Jane Doe",
    "recipient_address": "12 Harbour Rd",
    "recipient_country": "USA",
    "origin": "Shanghai, China",
    "destination": "Los Angeles, USA",
    "package_description": "Machine parts",
    "weight_kg": "12.5",
    "package_value": "",
    "service_type": "express",
    "delivery_days": "",
    "shipping_fee": "",
    "currency": "USD",
}

def create_shipment(admin_client):
    resp = admin_client.post("/admin/shipments/new", data=CREATE_FORM)
    assert resp.status_code == 201, resp.text
    number = resp.text.split('id="tracking-number">')[1].split("<")[0]
    found = admin_client.get("/api/admin/shipments", params={"q": number}).json()
    return found[0]

def edit_form(shipment, **overrides):
    data = dict(CREATE_FORM)
    data.update({
        "status": shipment["status"],
        "current_location": shipment["current_location"] or "",
        "estimated_delivery": shipment["estimated_delivery"] or "",
    })
    data.update(overrides)
    return data

def test_home(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert 'action="/track"' in resp.text
    assert "Request a quote" in resp.text

def test_track_form_normalizes(client):
    resp = client.get("/track", params={"tracking_number": "  glx1abc "}, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/track/GLX1ABC"

def test_track_form_blank(client):
    resp = client.get("/track", params={"tracking_number": "   "})
    assert resp.status_code == 422
    assert "Please enter a tracking number" in resp.text

def test_track_page_not_found(client):
    resp = client.get("/track/nothing-here")
    assert resp.status_code == 404
    assert "Shipment Not Found" in resp.text
    assert "NOTHING-HERE" in resp.text
    assert "Tracking History" not in resp.text

def test_quote_form(client):
    resp = client.post("/quote", data={"name": "Ana", "email": "ana@example.com", "service_type": "air"})
    assert resp.status_code == 200
    assert "Quote request submitted successfully!" in resp.text

    resp = client.post("/quote", data={"name": "Ana", "email": "", "service_type": ""})
    assert resp.status_code == 422
    assert "Missing required fields: email, service type" in resp.text
    assert 'value="Ana"' in resp.text

def test_admin_pages_redirect_to_login(client):
    for path in ("/admin/dashboard", "/admin/shipments/new", "/admin/shipments/1"):
        resp = client.get(path, follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"].startswith("/admin?notice=")

def test_login_flow(client):
    resp = client.post("/admin", data={"password": "wrong"})
    assert resp.status_code == 401
    assert "Invalid password" in resp.text

    resp = client.post("/admin", data={"password": ADMIN_PASSWORD}, follow_redirects=False)
    assert resp.status_code == 303
    assert client.get("/admin/dashboard").status_code == 200
    assert client.get("/admin", follow_redirects=False).headers["location"].startswith("/admin/dashboard")

    client.get("/admin/logout")
    resp = client.get("/admin/dashboard", follow_redirects=False)
    assert resp.status_code == 303

def test_create_page(admin_client):
    resp = admin_client.post("/admin/shipments/new", data=CREATE_FORM)
    assert resp.status_code == 201
    assert "Shipment created successfully!" in resp.text
    assert "http://testserver/track/GLX" in resp.text

def test_create_page_missing_fields(admin_client):
    resp = admin_client.post("/admin/shipments/new", data=dict(CREATE_FORM, recipient_address=""))
    assert resp.status_code == 422
    assert "recipient address" in resp.text
    # entered values are kept
    assert 'value="Li Wei"' in resp.text

def test_create_page_bad_number(admin_client):
    resp = admin_client.post("/admin/shipments/new", data=dict(CREATE_FORM, weight_kg="heavy"))
    assert resp.status_code == 422
    assert "Invalid number for weight kg" in resp.text

def test_edit_and_track(admin_client):
    shipment = create_shipment(admin_client)
    resp = admin_client.post(
        f"/admin/shipments/{shipment['id']}",
        data=edit_form(
            shipment,
            status="out-for-delivery",
            current_location="Los Angeles Hub",
            customs_hold="on",
            event_id=["", ""],
            event_title=["Picked up", "Out for delivery"],
            event_location=["Shanghai", "Los Angeles"],
            event_date=["2024-12-20T09:00", "2024-12-27T08:00"],
            event_completed=["1", "0"],
            event_action=["keep", "keep"],
        ),
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert "Shipment%20updated%20successfully" in resp.headers["location"]

    page = admin_client.get(f"/track/{shipment['tracking_number'].lower()}")
    assert page.status_code == 200
    assert "Customs Hold - Action Required" in page.text
    assert "Los Angeles Hub" in page.text
    assert 'class="step step-current">Out for Delivery' in page.text
    assert page.text.index("Out for delivery</strong>") < page.text.index("Picked up</strong>")
    assert 'class="event pending"' in page.text
    assert 'class="event completed"' in page.text

def test_edit_removes_marked_events(admin_client):
    shipment = create_shipment(admin_client)
    admin_client.put(f"/api/admin/shipments/{shipment['id']}", json={
        "events": [
            {"title": "Picked up", "location": "Shanghai", "event_date": "2024-12-20T09:00:00"},
            {"title": "Duplicate scan", "location": "Shanghai", "event_date": "2024-12-20T10:00:00"},
        ],
    })
    events = admin_client.get(f"/api/admin/shipments/{shipment['id']}").json()["events"]

    page = admin_client.get(f"/admin/shipments/{shipment['id']}")
    assert page.status_code == 200
    assert "Duplicate scan" in page.text

    resp = admin_client.post(
        f"/admin/shipments/{shipment['id']}",
        data=edit_form(
            shipment,
            event_id=[str(events[0]["id"]), str(events[1]["id"]), ""],
            event_title=["Picked up", "Duplicate scan", ""],
            event_location=["Shanghai", "Shanghai", ""],
            event_date=["2024-12-20T09:00", "2024-12-20T10:00", ""],
            event_completed=["1", "1", "0"],
            event_action=["keep", "remove", "keep"],
        ),
        follow_redirects=False,
    )
    assert resp.status_code == 303
    remaining = admin_client.get(f"/api/admin/shipments/{shipment['id']}").json()["events"]
    assert [e["title"] for e in remaining] == ["Picked up"]
    assert remaining[0]["completed"] is True

def test_dashboard_search_and_delete(admin_client):
    shipment = create_shipment(admin_client)
    page = admin_client.get("/admin/dashboard", params={"q": "jane"})
    assert shipment["tracking_number"] in page.text
    assert "Total: 1" in page.text
    assert shipment["tracking_number"] not in admin_client.get("/admin/dashboard", params={"q": "zzz"}).text

    resp = admin_client.post(f"/admin/shipments/{shipment['id']}/delete", follow_redirects=False)
    assert resp.status_code == 303
    assert "Shipment%20deleted" in resp.headers["location"]
    assert admin_client.get(f"/track/{shipment['tracking_number']}").status_code == 404

def test_edit_missing_shipment_redirects(admin_client):
    resp = admin_client.get("/admin/shipments/9999", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"].startswith("/admin/dashboard?notice=")

def test_image_pages(admin_client, storage):
    shipment = create_shipment(admin_client)
    resp = admin_client.post(
        f"/admin/shipments/{shipment['id']}/images",
        files=[("files", ("front.png", b"png-bytes", "image/png"))],
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert "1%20image%28s%29%20uploaded" in resp.headers["location"]

    url = admin_client.get(f"/api/admin/shipments/{shipment['id']}").json()["package_images"][0]
    assert f'src="{url}"' in admin_client.get(f"/track/{shipment['tracking_number']}").text

    resp = admin_client.post(f"/admin/shipments/{shipment['id']}/images/remove", data={"url": url}, follow_redirects=False)
    assert resp.status_code == 303
    assert not (storage.root / storage.path_from_url(url)).exists()
