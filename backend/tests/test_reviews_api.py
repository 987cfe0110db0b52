"""
BookClub Backend — Review and Comment Endpoint Tests
=====================================================

What we test:
    ✅ Create/list/get reviews with embedded author
    ✅ Review of an unknown book "404-3"; rating out of range rejected
    ✅ Only the author may update or delete ("403-1")
    ✅ Deleting a review removes its comments
    ✅ Comments: add, list oldest first, author-only delete
"""

import pytest


@pytest.fixture
def book_id_for(test_client):
    async def _book(headers) -> int:
        response = await test_client.post(
            "/books", json={"title": "Dune", "author": "Frank Herbert"}, headers=headers
        )
        return response.json()["data"]["id"]

    return _book


async def post_review(client, book_id, headers, content="Loved it", rating=5):
    return await client.post(
        f"/books/{book_id}/reviews", json={"content": content, "rating": rating}, headers=headers
    )


class TestReviews:

    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client, auth_headers, book_id_for):
        reader = await auth_headers("reader01")
        book_id = await book_id_for(reader)

        response = await post_review(test_client, book_id, reader)
        assert response.status_code == 201
        review = response.json()["data"]
        assert review["author"] == {"username": "reader01", "nickname": "reader01-nick"}
        assert review["rating"] == 5

        fetched = (await test_client.get(f"/reviews/{review['id']}")).json()["data"]
        assert fetched["content"] == "Loved it"
        assert fetched["author"]["username"] == "reader01"

    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_client, auth_headers, book_id_for):
        reader = await auth_headers("reader01")
        book_id = await book_id_for(reader)
        for rating in (3, 4, 5):
            await post_review(test_client, book_id, reader, content=f"{rating} stars", rating=rating)

        page = (await test_client.get(f"/books/{book_id}/reviews", params={"limit": 2})).json()["data"]
        assert [r["rating"] for r in page["items"]] == [5, 4]
        assert page["total_count"] == 3
        assert page["has_more"] is True

    @pytest.mark.asyncio
    async def test_unknown_book(self, test_client, auth_headers):
        reader = await auth_headers("reader01")
        response = await post_review(test_client, 999, reader)

        assert response.status_code == 404
        assert response.json()["code"] == "404-3"

    @pytest.mark.asyncio
    async def test_rating_out_of_range(self, test_client, auth_headers, book_id_for):
        reader = await auth_headers("reader01")
        book_id = await book_id_for(reader)
        response = await post_review(test_client, book_id, reader, rating=6)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_by_author(self, test_client, auth_headers, book_id_for):
        reader = await auth_headers("reader01")
        book_id = await book_id_for(reader)
        review_id = (await post_review(test_client, book_id, reader)).json()["data"]["id"]

        response = await test_client.put(
            f"/reviews/{review_id}", json={"rating": 3}, headers=reader
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["rating"] == 3
        assert data["content"] == "Loved it"

    @pytest.mark.asyncio
    async def test_only_author_can_change(self, test_client, auth_headers, book_id_for):
        reader = await auth_headers("reader01")
        writer = await auth_headers("writer01")
        book_id = await book_id_for(reader)
        review_id = (await post_review(test_client, book_id, reader)).json()["data"]["id"]

        update = await test_client.put(
            f"/reviews/{review_id}", json={"content": "Hijacked"}, headers=writer
        )
        assert update.status_code == 403
        assert update.json()["code"] == "403-1"

        delete = await test_client.delete(f"/reviews/{review_id}", headers=writer)
        assert delete.status_code == 403

        fetched = (await test_client.get(f"/reviews/{review_id}")).json()["data"]
        assert fetched["content"] == "Loved it"

    @pytest.mark.asyncio
    async def test_delete_removes_comments(self, test_client, auth_headers, book_id_for):
        reader = await auth_headers("reader01")
        writer = await auth_headers("writer01")
        book_id = await book_id_for(reader)
        review_id = (await post_review(test_client, book_id, reader)).json()["data"]["id"]
        comment = await test_client.post(
            f"/reviews/{review_id}/comments", json={"content": "Agreed"}, headers=writer
        )
        comment_id = comment.json()["data"]["id"]

        response = await test_client.delete(f"/reviews/{review_id}", headers=reader)
        assert response.status_code == 200

        assert (await test_client.get(f"/reviews/{review_id}")).status_code == 404
        gone = await test_client.delete(f"/comments/{comment_id}", headers=writer)
        assert gone.status_code == 404
        assert gone.json()["code"] == "404-2"


class TestComments:

    @pytest.mark.asyncio
    async def test_add_and_list(self, test_client, auth_headers, book_id_for):
        reader = await auth_headers("reader01")
        writer = await auth_headers("writer01")
        book_id = await book_id_for(reader)
        review_id = (await post_review(test_client, book_id, reader)).json()["data"]["id"]

        first = await test_client.post(
            f"/reviews/{review_id}/comments", json={"content": "First!"}, headers=writer
        )
        assert first.status_code == 201
        await test_client.post(
            f"/reviews/{review_id}/comments", json={"content": "Thanks"}, headers=reader
        )

        comments = (await test_client.get(f"/reviews/{review_id}/comments")).json()["data"]
        assert [c["content"] for c in comments] == ["First!", "Thanks"]
        assert comments[0]["author"]["username"] == "writer01"

    @pytest.mark.asyncio
    async def test_comment_on_unknown_review(self, test_client, auth_headers):
        reader = await auth_headers("reader01")
        response = await test_client.post(
            "/reviews/999/comments", json={"content": "Hello"}, headers=reader
        )
        assert response.status_code == 404
        assert response.json()["code"] == "404-1"

    @pytest.mark.asyncio
    async def test_only_author_deletes_comment(self, test_client, auth_headers, book_id_for):
        reader = await auth_headers("reader01")
        writer = await auth_headers("writer01")
        book_id = await book_id_for(reader)
        review_id = (await post_review(test_client, book_id, reader)).json()["data"]["id"]
        comment_id = (
            await test_client.post(
                f"/reviews/{review_id}/comments", json={"content": "Mine"}, headers=writer
            )
        ).json()["data"]["id"]

        denied = await test_client.delete(f"/comments/{comment_id}", headers=reader)
        assert denied.status_code == 403

        allowed = await test_client.delete(f"/comments/{comment_id}", headers=writer)
        assert allowed.status_code == 200
        assert (await test_client.get(f"/reviews/{review_id}/comments")).json()["data"] == []
