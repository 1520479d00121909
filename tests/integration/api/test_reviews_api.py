"""
Integration tests for the review endpoints.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from vacation_booking.db.engine import engine
from vacation_booking.services.bookings import complete_finished_stays

REVIEWS_URL = "/api/v1/reviews"


@pytest.fixture
def completed_booking(
    client: TestClient,
    guest_headers: dict[str, str],
    owner_headers: dict[str, str],
) -> Callable[..., int]:
    """Book a stay, confirm it as the owner and complete it after check-out."""

    def create(listing_id: int, check_in: date, nights: int = 2) -> int:
        check_out = check_in + timedelta(days=nights)
        response = client.post(
            "/api/v1/bookings",
            json={
                "listing_id": listing_id,
                "check_in_date": check_in.isoformat(),
                "check_out_date": check_out.isoformat(),
                "guests_count": 2,
                "guest_name": "Ana Perez",
                "guest_email": "guest@example.com",
                "payment_method": "bank_transfer",
            },
            headers=guest_headers,
        )
        booking_id = response.json()["booking_id"]
        client.put(
            f"/api/v1/bookings/{booking_id}/status",
            json={"status": "confirmed"},
            headers=owner_headers,
        )
        complete_finished_stays(engine, today=check_out)
        return booking_id

    return create


def review_payload(booking_id: int, rating: int = 5) -> dict[str, object]:
    return {
        "booking_id": booking_id,
        "rating": rating,
        "title": "Lovely stay",
        "comment": "Quiet street, spotless kitchen.",
    }


@pytest.mark.integration
def test_guest_reviews_completed_stay(
    client: TestClient,
    listing_factory: Callable[..., int],
    stay_dates: tuple[date, date],
    completed_booking: Callable[..., int],
    guest_headers: dict[str, str],
) -> None:
    """Test that a review is accepted and awaits moderation."""
    booking_id = completed_booking(listing_factory(), stay_dates[0])

    response = client.post(REVIEWS_URL, json=review_payload(booking_id), headers=guest_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending_moderation"
    assert isinstance(body["review_id"], int)


@pytest.mark.integration
def test_second_review_of_booking_conflicts(
    client: TestClient,
    listing_factory: Callable[..., int],
    stay_dates: tuple[date, date],
    completed_booking: Callable[..., int],
    guest_headers: dict[str, str],
) -> None:
    """Test that a booking can be reviewed only once."""
    booking_id = completed_booking(listing_factory(), stay_dates[0])
    client.post(REVIEWS_URL, json=review_payload(booking_id), headers=guest_headers)

    response = client.post(
        REVIEWS_URL, json=review_payload(booking_id, rating=1), headers=guest_headers
    )

    assert response.status_code == 409


@pytest.mark.integration
def test_unfinished_stay_cannot_be_reviewed(
    client: TestClient,
    listing_factory: Callable[..., int],
    stay_dates: tuple[date, date],
    guest_headers: dict[str, str],
) -> None:
    """Test that pending bookings are not reviewable."""
    listing_id = listing_factory()
    booking_id = client.post(
        "/api/v1/bookings",
        json={
            "listing_id": listing_id,
            "check_in_date": stay_dates[0].isoformat(),
            "check_out_date": stay_dates[1].isoformat(),
            "guests_count": 2,
            "guest_name": "Ana Perez",
            "guest_email": "guest@example.com",
            "payment_method": "bank_transfer",
        },
        headers=guest_headers,
    ).json()["booking_id"]

    response = client.post(REVIEWS_URL, json=review_payload(booking_id), headers=guest_headers)

    assert response.status_code == 400


@pytest.mark.integration
def test_only_the_guest_can_review(
    client: TestClient,
    listing_factory: Callable[..., int],
    stay_dates: tuple[date, date],
    completed_booking: Callable[..., int],
    owner_headers: dict[str, str],
) -> None:
    """Test that other users cannot review someone else's stay."""
    booking_id = completed_booking(listing_factory(), stay_dates[0])

    response = client.post(REVIEWS_URL, json=review_payload(booking_id), headers=owner_headers)

    assert response.status_code == 403


@pytest.mark.integration
def test_review_unknown_booking(client: TestClient, guest_headers: dict[str, str]) -> None:
    """Test that reviewing an unknown booking is 404."""
    response = client.post(REVIEWS_URL, json=review_payload(999999), headers=guest_headers)

    assert response.status_code == 404


@pytest.mark.integration
def test_rating_out_of_range(client: TestClient, guest_headers: dict[str, str]) -> None:
    """Test that ratings are between 1 and 5."""
    response = client.post(REVIEWS_URL, json=review_payload(1, rating=6), headers=guest_headers)

    assert response.status_code == 422


@pytest.mark.integration
def test_moderation_publishes_reviews(
    client: TestClient,
    listing_factory: Callable[..., int],
    stay_dates: tuple[date, date],
    completed_booking: Callable[..., int],
    guest_headers: dict[str, str],
    admin_headers: dict[str, str],
) -> None:
    """Test that only approved reviews are listed and averaged."""
    listing_id = listing_factory()
    first = completed_booking(listing_id, stay_dates[0])
    second = completed_booking(listing_id, stay_dates[0] + timedelta(days=7))
    third = completed_booking(listing_id, stay_dates[0] + timedelta(days=14))
    review_ids = [
        client.post(
            REVIEWS_URL, json=review_payload(booking_id, rating), headers=guest_headers
        ).json()["review_id"]
        for booking_id, rating in ((first, 5), (second, 4), (third, 1))
    ]

    before = client.get(f"/api/v1/listings/{listing_id}/reviews").json()
    assert before == {
        "listing_id": listing_id,
        "average_rating": None,
        "review_count": 0,
        "reviews": [],
    }

    for review_id, approved in zip(review_ids, (True, True, False)):
        response = client.put(
            f"/api/v1/admin/reviews/{review_id}/moderate",
            json={"approved": approved},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"review_id": review_id, "approved": approved}

    after = client.get(f"/api/v1/listings/{listing_id}/reviews").json()
    assert after["average_rating"] == 4.5
    assert after["review_count"] == 2
    assert sorted(review["rating"] for review in after["reviews"]) == [4, 5]
    assert {review["reviewer_name"] for review in after["reviews"]} == {"Ana Perez"}


@pytest.mark.integration
def test_moderation_is_final(
    client: TestClient,
    listing_factory: Callable[..., int],
    stay_dates: tuple[date, date],
    completed_booking: Callable[..., int],
    guest_headers: dict[str, str],
    admin_headers: dict[str, str],
) -> None:
    """Test that a moderated review cannot be moderated again."""
    booking_id = completed_booking(listing_factory(), stay_dates[0])
    review_id = client.post(
        REVIEWS_URL, json=review_payload(booking_id), headers=guest_headers
    ).json()["review_id"]
    url = f"/api/v1/admin/reviews/{review_id}/moderate"

    client.put(url, json={"approved": False}, headers=admin_headers)
    response = client.put(url, json={"approved": True}, headers=admin_headers)

    assert response.status_code == 409


@pytest.mark.integration
def test_moderation_requires_admin(
    client: TestClient,
    listing_factory: Callable[..., int],
    stay_dates: tuple[date, date],
    completed_booking: Callable[..., int],
    guest_headers: dict[str, str],
    admin_headers: dict[str, str],
) -> None:
    """Test that guests cannot moderate and unknown reviews are 404."""
    booking_id = completed_booking(listing_factory(), stay_dates[0])
    review_id = client.post(
        REVIEWS_URL, json=review_payload(booking_id), headers=guest_headers
    ).json()["review_id"]

    forbidden = client.put(
        f"/api/v1/admin/reviews/{review_id}/moderate",
        json={"approved": True},
        headers=guest_headers,
    )
    missing = client.put(
        "/api/v1/admin/reviews/999999/moderate", json={"approved": True}, headers=admin_headers
    )

    assert forbidden.status_code == 403
    assert missing.status_code == 404


@pytest.mark.integration
def test_reviews_of_unknown_listing(client: TestClient) -> None:
    """Test that listing reviews of an unknown listing is 404."""
    assert client.get("/api/v1/listings/999999/reviews").status_code == 404
