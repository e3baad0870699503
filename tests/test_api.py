from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from app.config import settings
from app.models.admin import AdminActivity
from app.models.otp import OtpChallenge
from app.services.otp_service import OtpService

from tests.conftest import ADMIN_PASSWORD

API = settings.API_V1_PREFIX
MB = 1024 * 1024


def jpeg_upload(field, name="pan.jpg", size=1024):
    return (field, (name, b"\xff\xd8" + b"0" * size, "image/jpeg"))


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_otp_login_creates_seller(client):
    sent = await client.post(f"{API}/auth/send-otp", json={"phone": "+91 98765 43211"})
    assert sent.status_code == 200
    otp = sent.json()["otp"]

    again = await client.post(f"{API}/auth/send-otp", json={"phone": "+919876543211"})
    assert again.status_code == 400

    verified = await client.post(f"{API}/auth/verify-otp", json={"phone": "+919876543211", "otp": otp})
    assert verified.status_code == 200
    body = verified.json()
    assert body["user"]["is_new_user"] is True
    assert body["user"]["verification_status"] == "pending"
    assert body["user"]["union_membership"]["id"].startswith("UU")

    me = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["phone"] == "+919876543211"


async def test_otp_attempt_limit(client, db):
    sent = await client.post(f"{API}/auth/send-otp", json={"phone": "+919876543212"})
    otp = sent.json()["otp"]
    wrong = "000000" if otp != "000000" else "111111"

    messages = []
    for _ in range(3):
        response = await client.post(f"{API}/auth/verify-otp", json={"phone": "+919876543212", "otp": wrong})
        assert response.status_code == 400
        messages.append(response.json()["detail"])
    assert messages[0] == "Invalid OTP. 2 attempts remaining."
    assert messages[2] == "Invalid OTP. 0 attempts remaining."

    locked_out = await client.post(f"{API}/auth/verify-otp", json={"phone": "+919876543212", "otp": otp})
    assert locked_out.status_code == 400
    assert locked_out.json()["detail"] == "Too many incorrect attempts. Please request a new OTP."


async def test_expired_otp_rejected_and_purged(db):
    start = datetime.now(timezone.utc)
    sent = await OtpService.send(db, "+919876543213", now=start)
    assert sent.success

    late = start + timedelta(minutes=settings.OTP_EXPIRE_MINUTES, seconds=1)
    result = await OtpService.verify(db, "+919876543213", sent.otp, now=late)
    assert not result.success
    assert result.message == "OTP has expired"

    await OtpService.send(db, "+919876543214", now=start)
    removed = await OtpService.purge_expired(db, now=late)
    assert removed == 1
    remaining = await db.execute(select(OtpChallenge))
    assert remaining.scalars().all() == []


async def test_admin_lockout_after_five_failures(client, admin):
    for _ in range(5):
        response = await client.post(
            f"{API}/auth/admin/login", json={"username": admin.username, "password": "wrong-password"}
        )
        assert response.status_code == 401

    response = await client.post(
        f"{API}/auth/admin/login", json={"username": admin.username, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 423


async def test_admin_login_records_activity(client, admin, db):
    response = await client.post(
        f"{API}/auth/admin/login", json={"username": admin.username, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["admin"]["username"] == admin.username

    activity = await db.execute(select(AdminActivity).where(AdminActivity.admin_id == admin.id))
    assert [a.action for a in activity.scalars().all()] == ["login"]


async def test_upload_rejects_invalid_batch(client, seller_headers):
    response = await client.post(
        f"{API}/sellers/upload-documents",
        headers=seller_headers,
        data={"document_type": "PAN"},
        files=[
            jpeg_upload("documents"),
            ("documents", ("payload.exe", b"MZ" + b"0" * 10, "application/x-msdownload")),
        ],
    )
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "File validation failed"
    assert detail["errors"][0].startswith("File 2: Invalid file type")
    assert "File type not allowed for security reasons" in detail["errors"][0]


async def test_reject_then_resubmit_flow(client, seller, seller_headers, admin_headers):
    first = await client.post(
        f"{API}/sellers/upload-documents",
        headers=seller_headers,
        data={"document_type": "PAN"},
        files=[jpeg_upload("documents", "pan-front.jpg"), jpeg_upload("documents", "pan-back.jpg")],
    )
    assert first.status_code == 200
    assert first.json()["verification_status"] == "pending"
    assert all(d["original_name"] != d["filename"] for d in first.json()["documents"])

    rejected = await client.put(
        f"{API}/admin/verify/{seller.id}",
        headers=admin_headers,
        json={"action": "reject", "rejection_reason": "Blurry PAN card"},
    )
    assert rejected.status_code == 200
    assert rejected.json()["verification_status"] == "pending"
    assert rejected.json()["verification"]["status"] == "rejected"

    resubmitted = await client.post(
        f"{API}/sellers/upload-documents",
        headers=seller_headers,
        data={"document_type": "PAN"},
        files=[jpeg_upload("documents", "pan-sharp.jpg")],
    )
    assert resubmitted.status_code == 200

    detail = await client.get(f"{API}/admin/sellers/{seller.id}", headers=admin_headers)
    assert detail.status_code == 200
    body = detail.json()
    assert body["verification_status"] == "pending"
    assert body["verification_state"] == "docs_submitted"
    assert body["verification"]["status"] == "pending"
    assert len(body["verification"]["documents"]) == 3
    assert [h["action"] for h in body["verification"]["history"]] == ["rejected", "resubmitted"]


async def test_alternate_documents_report_provisional_status(client, seller_headers):
    response = await client.post(
        f"{API}/sellers/alternate-documents",
        headers=seller_headers,
        data={"types": ["Work Photo"], "descriptions": ["Pottery wheel at home"]},
        files=[("alternate_documents", ("wheel.png", b"\x89PNG" + b"0" * 64, "image/png"))],
    )
    assert response.status_code == 200
    assert response.json()["verification_status"] == "provisional"
    assert response.json()["union_membership"]["expiry_date"] is not None

    status = await client.get(f"{API}/sellers/verification-status", headers=seller_headers)
    body = status.json()
    assert body["verification"]["status"] == "under-review"
    assert body["verification"]["provisional_details"]["is_provisional"] is True
    assert body["is_provisional_expired"] is False
    assert body["can_renew"] is True


async def test_verification_status_without_record(client, seller_headers):
    response = await client.get(f"{API}/sellers/verification-status", headers=seller_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["verification_status"] == "pending"
    assert "verification" not in body
    assert "can_renew" not in body


async def test_product_creation_requires_verified_seller(client, seller, seller_headers, admin_headers):
    product = {
        "name": "Blue pottery vase",
        "description": "Hand painted Jaipur blue pottery vase",
        "category": "Handicrafts",
        "tags": ["pottery", "decor"],
        "price": "1250.00",
        "max_units": 20,
        "lead_time": "2 weeks",
    }

    forbidden = await client.post(f"{API}/products/", headers=seller_headers, json=product)
    assert forbidden.status_code == 403
    assert "pending" in forbidden.json()["detail"]

    approved = await client.put(
        f"{API}/admin/verify/{seller.id}", headers=admin_headers, json={"action": "approve", "notes": "Known artisan"}
    )
    assert approved.status_code == 200
    assert approved.json()["union_membership"]["issue_date"] is not None

    created = await client.post(f"{API}/products/", headers=seller_headers, json=product)
    assert created.status_code == 201
    assert created.json()["available_units"] == 20
    assert created.json()["is_available"] is True

    listing = await client.get(f"{API}/products/", params={"category": "Handicrafts"})
    assert listing.json()["total"] == 1


async def test_membership_update_requires_permission(client, seller, admin_headers):
    response = await client.put(
        f"{API}/admin/membership/{seller.id}",
        headers=admin_headers,
        json={"status": "suspended", "reason": "Duplicate account"},
    )
    assert response.status_code == 200
    assert response.json()["union_membership"]["status"] == "suspended"
    assert response.json()["union_membership"]["reason"] == "Duplicate account"


async def test_admin_routes_reject_seller_tokens(client, seller_headers):
    response = await client.get(f"{API}/admin/sellers", headers=seller_headers)
    assert response.status_code == 401


async def test_dashboard_and_analytics(client, seller, admin_headers):
    dashboard = await client.get(f"{API}/admin/dashboard", headers=admin_headers)
    assert dashboard.status_code == 200
    assert dashboard.json()["statistics"]["total_sellers"] == 1
    assert dashboard.json()["statistics"]["pending_sellers"] == 1

    analytics = await client.get(f"{API}/admin/analytics", headers=admin_headers, params={"period": "7d"})
    assert analytics.status_code == 200
    body = analytics.json()
    assert body["period"] == "7d"
    assert body["category_distribution"] == [{"key": "Handicrafts", "count": 1}]
    assert body["regional_distribution"] == [{"key": "Rajasthan", "count": 1}]


async def test_seller_list_filters(client, seller, admin_headers):
    response = await client.get(
        f"{API}/admin/sellers", headers=admin_headers, params={"status": "pending", "category": "Handicrafts"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["verification"] is None

    none = await client.get(f"{API}/admin/sellers", headers=admin_headers, params={"status": "verified"})
    assert none.json()["total"] == 0
