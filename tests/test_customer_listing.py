import pytest

from crm.models.address import Address
from crm.services.customer_query import CustomerFilters, list_customers
from tests.support import build_client, build_session, seed_customer


def test_list_reports_single_address_per_row():
    client, db = build_client()
    seed_customer(db, 1, addresses=0)
    seed_customer(db, 2, addresses=1)
    seed_customer(db, 3, addresses=2)

    response = client.get("/api/customers")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["page"] == 1
    assert body["limit"] == 20
    flags = {row["firstName"]: row["singleAddress"] for row in body["customers"]}
    assert flags == {"First1": False, "First2": True, "First3": False}


def test_multiple_addresses_do_not_inflate_total_or_page():
    client, db = build_client()
    for index in range(1, 6):
        seed_customer(db, index, addresses=3, city="Mumbai", state="Maharashtra")

    first_page = client.get("/api/customers", params={"city": "Mumbai", "limit": 2}).json()
    last_page = client.get("/api/customers", params={"city": "Mumbai", "limit": 2, "page": 3}).json()

    assert first_page["total"] == 5
    assert len(first_page["customers"]) == 2
    assert [row["id"] for row in first_page["customers"]] == sorted({row["id"] for row in first_page["customers"]})
    assert last_page["total"] == 5
    assert len(last_page["customers"]) == 1


def test_pages_cover_every_customer_once_in_id_order():
    client, db = build_client()
    for index in range(1, 8):
        seed_customer(db, index, addresses=index % 3)

    seen = []
    for page in range(1, 5):
        seen.extend(row["id"] for row in client.get("/api/customers", params={"page": page, "limit": 2}).json()["customers"])

    assert seen == sorted(seen)
    assert len(seen) == len(set(seen)) == 7


def test_city_without_matches_returns_empty_page():
    client, db = build_client()
    seed_customer(db, 1, addresses=2, city="Chennai")

    body = client.get("/api/customers", params={"city": "Atlantis"}).json()

    assert body["total"] == 0
    assert body["customers"] == []


def test_free_text_search_matches_names_phone_and_email():
    client, db = build_client()
    seed_customer(db, 11, addresses=1)
    seed_customer(db, 22, addresses=1)

    by_name = client.get("/api/customers", params={"q": "first11"}).json()
    by_phone = client.get("/api/customers", params={"q": "9000000022"}).json()
    by_email = client.get("/api/customers", params={"q": "user11@"}).json()
    blank = client.get("/api/customers", params={"q": "  "}).json()

    assert [row["firstName"] for row in by_name["customers"]] == ["First11"]
    assert [row["firstName"] for row in by_phone["customers"]] == ["First22"]
    assert [row["firstName"] for row in by_email["customers"]] == ["First11"]
    assert blank["total"] == 2


def test_invalid_paging_parameters_are_rejected():
    client, _db = build_client()

    zero_page = client.get("/api/customers", params={"page": 0})
    zero_limit = client.get("/api/customers", params={"limit": 0})
    bad_sort = client.get("/api/customers", params={"sortBy": "phone"})

    assert zero_page.status_code == 400
    assert zero_page.json()["errors"][0]["field"] == "page"
    assert zero_limit.status_code == 400
    assert bad_sort.status_code == 400


def test_sorting_by_last_name_descending():
    client, db = build_client()
    for index in (3, 1, 2):
        seed_customer(db, index)

    body = client.get("/api/customers", params={"sortBy": "lastName", "order": "desc"}).json()

    assert [row["lastName"] for row in body["customers"]] == ["Last3", "Last2", "Last1"]


def test_address_filters_must_hold_on_the_same_address():
    db = build_session()
    customer = seed_customer(db, 1, addresses=1, city="Mumbai", state="Maharashtra")
    db.add(Address(customer_id=customer.id, line1="Other", city="Pune", state="Goa", pincode="411001"))
    db.commit()

    mismatched = list_customers(db, CustomerFilters(city="Pune", state="Maharashtra"))
    matched = list_customers(db, CustomerFilters(city="Pune", state="Goa", pincode="411001"))

    assert mismatched.total == 0
    assert mismatched.rows == []
    assert matched.total == 1
    assert matched.rows[0].customer.id == customer.id
    assert matched.rows[0].address_count == 2
    assert matched.rows[0].single_address is False


def test_list_customers_never_exceeds_limit():
    db = build_session()
    for index in range(1, 13):
        seed_customer(db, index, addresses=2, city="Kolkata")

    for limit in (1, 5, 12, 50):
        result = list_customers(db, CustomerFilters(city="Kolkata"), page=1, limit=limit)
        assert len(result.rows) <= limit
        assert result.total == 12


def test_list_customers_rejects_bad_arguments():
    db = build_session()

    with pytest.raises(ValueError):
        list_customers(db, CustomerFilters(), page=0)
    with pytest.raises(ValueError):
        list_customers(db, CustomerFilters(), limit=0)
    with pytest.raises(ValueError):
        list_customers(db, CustomerFilters(), sort_by="email")
