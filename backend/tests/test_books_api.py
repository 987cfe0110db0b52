"""
BookClub Backend — Book and Favorite Endpoint Tests
====================================================

What we test:
    ✅ Register a book (auth required), ISBN normalised, duplicate ISBN "400-3"
    ✅ Cursor pagination and title/author search; % and _ match literally
    ✅ Detail with favorite/review aggregates; unknown id "404-1"
    ✅ Favorite, duplicate favorite "400-1", unfavorite, "400-2" when absent
    ✅ /books/favorites lists only the caller's marks
"""

import pytest


def book_payload(title: str, author: str = "Ursula K. Le Guin", **overrides):
    payload = {"title": title, "author": author, "publisher": "Ace"}
    payload.update(overrides)
    return payload


@pytest.fixture
def create_book(test_client):
    async def _create(headers, title: str, **overrides) -> int:
        response = await test_client.post("/books", json=book_payload(title, **overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    return _create


class TestRegisterBook:

    @pytest.mark.asyncio
    async def test_create_normalises_isbn(self, test_client, auth_headers):
        headers = await auth_headers("reader01")
        response = await test_client.post(
            "/books",
            json=book_payload("The Dispossessed", isbn="978-0-06-051275-3"),
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["isbn"] == "9780060512753"
        assert data["title"] == "The Dispossessed"

    @pytest.mark.asyncio
    async def test_duplicate_isbn(self, test_client, auth_headers, create_book):
        headers = await auth_headers("reader01")
        await create_book(headers, "The Dispossessed", isbn="9780060512753")

        response = await test_client.post(
            "/books",
            json=book_payload("Another Title", isbn="978-0060512753"),
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "400-3"

    @pytest.mark.asyncio
    async def test_invalid_isbn(self, test_client, auth_headers):
        headers = await auth_headers("reader01")
        response = await test_client.post(
            "/books", json=book_payload("Bad", isbn="12345"), headers=headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client):
        response = await test_client.post("/books", json=book_payload("Anonymous"))
        assert response.status_code == 401


class TestListBooks:

    @pytest.mark.asyncio
    async def test_cursor_pagination(self, test_client, auth_headers, create_book):
        headers = await auth_headers("reader01")
        ids = [await create_book(headers, f"Book {i}") for i in range(5)]

        first = (await test_client.get("/books", params={"limit": 2})).json()["data"]
        assert [b["id"] for b in first["items"]] == [ids[4], ids[3]]
        assert first["has_more"] is True
        assert first["total_count"] == 5
        assert first["next_cursor"] == ids[3]

        second = (
            await test_client.get("/books", params={"limit": 2, "cursor": first["next_cursor"]})
        ).json()["data"]
        assert [b["id"] for b in second["items"]] == [ids[2], ids[1]]

        last = (
            await test_client.get("/books", params={"limit": 2, "cursor": second["next_cursor"]})
        ).json()["data"]
        assert [b["id"] for b in last["items"]] == [ids[0]]
        assert last["has_more"] is False
        assert last["next_cursor"] is None

    @pytest.mark.asyncio
    async def test_search_title_and_author(self, test_client, auth_headers, create_book):
        headers = await auth_headers("reader01")
        await create_book(headers, "The Left Hand of Darkness")
        await create_book(headers, "Dune", author="Frank Herbert")

        by_title = (await test_client.get("/books", params={"query": "darkness"})).json()["data"]
        assert [b["title"] for b in by_title["items"]] == ["The Left Hand of Darkness"]
        assert by_title["total_count"] == 1

        by_author = (await test_client.get("/books", params={"query": "herbert"})).json()["data"]
        assert [b["title"] for b in by_author["items"]] == ["Dune"]

    @pytest.mark.asyncio
    async def test_search_wildcards_match_literally(self, test_client, auth_headers, create_book):
        headers = await auth_headers("reader01")
        await create_book(headers, "Dune", author="Frank Herbert")
        await create_book(headers, "Emma", author="Jane Austen")
        await create_book(headers, "100% Wolf", author="Jayne Lyons")

        percent = (await test_client.get("/books", params={"query": "%"})).json()["data"]
        assert [b["title"] for b in percent["items"]] == ["100% Wolf"]
        assert percent["total_count"] == 1

        underscore = (await test_client.get("/books", params={"query": "_"})).json()["data"]
        assert underscore["items"] == []
        assert underscore["total_count"] == 0


class TestBookDetail:

    @pytest.mark.asyncio
    async def test_detail_aggregates(self, test_client, auth_headers, create_book):
        reader = await auth_headers("reader01")
        writer = await auth_headers("writer01")
        book_id = await create_book(reader, "Dune", author="Frank Herbert")

        await test_client.post(f"/books/{book_id}/favorite", headers=reader)
        await test_client.post(
            f"/books/{book_id}/reviews", json={"content": "Great", "rating": 5}, headers=reader
        )
        await test_client.post(
            f"/books/{book_id}/reviews", json={"content": "Fine", "rating": 2}, headers=writer
        )

        data = (await test_client.get(f"/books/{book_id}")).json()["data"]
        assert data["favorite_count"] == 1
        assert data["review_count"] == 2
        assert data["average_rating"] == 3.5

    @pytest.mark.asyncio
    async def test_detail_without_reviews(self, test_client, auth_headers, create_book):
        headers = await auth_headers("reader01")
        book_id = await create_book(headers, "Dune")

        data = (await test_client.get(f"/books/{book_id}")).json()["data"]
        assert data["review_count"] == 0
        assert data["average_rating"] is None

    @pytest.mark.asyncio
    async def test_unknown_book(self, test_client):
        response = await test_client.get("/books/999")
        assert response.status_code == 404
        assert response.json()["code"] == "404-1"


class TestFavorites:

    @pytest.mark.asyncio
    async def test_favorite_lifecycle(self, test_client, auth_headers, create_book):
        reader = await auth_headers("reader01")
        writer = await auth_headers("writer01")
        dune = await create_book(reader, "Dune")
        emma = await create_book(reader, "Emma", author="Jane Austen")

        assert (await test_client.post(f"/books/{dune}/favorite", headers=reader)).status_code == 201
        assert (await test_client.post(f"/books/{emma}/favorite", headers=writer)).status_code == 201

        mine = (await test_client.get("/books/favorites", headers=reader)).json()["data"]
        assert [b["id"] for b in mine] == [dune]

        duplicate = await test_client.post(f"/books/{dune}/favorite", headers=reader)
        assert duplicate.status_code == 400
        assert duplicate.json()["code"] == "400-1"

        removed = await test_client.delete(f"/books/{dune}/favorite", headers=reader)
        assert removed.status_code == 200
        assert (await test_client.get("/books/favorites", headers=reader)).json()["data"] == []

        again = await test_client.delete(f"/books/{dune}/favorite", headers=reader)
        assert again.status_code == 400
        assert again.json()["code"] == "400-2"

    @pytest.mark.asyncio
    async def test_favorite_unknown_book(self, test_client, auth_headers):
        reader = await auth_headers("reader01")
        response = await test_client.post("/books/999/favorite", headers=reader)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_favorites_requires_token(self, test_client):
        response = await test_client.get("/books/favorites")
        assert response.status_code == 401
