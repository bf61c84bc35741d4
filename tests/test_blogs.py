"""
Tests for blog, like and comment endpoints.
"""
from app.models.blog import Blog
from app.models.comment import Comment, CommentReport
from app.models.like import Like
from app.models.user import User


class TestCreateBlog:
    """Authoring endpoints."""

    def test_create_draft(self, client, auth_headers, test_user, db):
        response = client.post(
            "/api/blogs",
            headers=auth_headers,
            json={
                "title": "Hello World!!",
                "content": "An introduction to the blog. " * 5,
                "tags": ["Intro", "intro", "meta"],
                "category": "Opinion",
            },
        )
        assert response.status_code == 201
        blog = response.json()["data"]["blog"]
        assert blog["status"] == "draft"
        assert blog["slug"] == "hello-world"
        assert blog["tags"] == ["intro", "meta"]
        assert blog["reading_time"] == 1
        assert blog["excerpt"].endswith("...")
        assert blog["published_at"] is None
        assert blog["author"]["display_name"] == "Test User"

        db.refresh(test_user)
        assert test_user.total_blogs == 1

    def test_create_unauthenticated(self, client):
        response = client.post("/api/blogs", json={"title": "Hello", "content": "x" * 60})
        assert response.status_code == 401

    def test_user_cannot_publish_directly(self, client, auth_headers):
        response = client.post(
            "/api/blogs",
            headers=auth_headers,
            json={"title": "Sneaky", "content": "x" * 60, "status": "approved"},
        )
        assert response.status_code == 403
        body = response.json()
        assert body["ok"] is False
        assert body["error_code"] == "FORBIDDEN"

    def test_validation_error_envelope(self, client, auth_headers):
        response = client.post(
            "/api/blogs",
            headers=auth_headers,
            json={"title": "Ok title", "content": "too short"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"] == {"field": "content"}

    def test_admin_publishes_directly(self, client, admin_headers, create_blog):
        blog = create_blog(admin_headers, status="approved")
        assert blog["status"] == "approved"
        assert blog["published_at"] is not None
        assert blog["formatted_publish_date"]


class TestUpdateBlog:
    def test_owner_submits_for_review(self, client, auth_headers, create_blog):
        blog = create_blog(auth_headers)
        response = client.put(f"/api/blogs/{blog['id']}", headers=auth_headers, json={"status": "pending"})
        assert response.status_code == 200
        assert response.json()["data"]["blog"]["status"] == "pending"

    def test_other_user_cannot_update(self, client, auth_headers, other_headers, create_blog):
        blog = create_blog(auth_headers)
        response = client.put(f"/api/blogs/{blog['id']}", headers=other_headers, json={"title": "Taken over"})
        assert response.status_code == 403

    def test_invalid_transition(self, client, auth_headers, create_blog):
        blog = create_blog(auth_headers, status="pending")
        response = client.put(f"/api/blogs/{blog['id']}", headers=auth_headers, json={"status": "draft"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_TRANSITION"

    def test_missing_blog(self, client, auth_headers):
        response = client.put("/api/blogs/999", headers=auth_headers, json={"title": "Nothing here"})
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


class TestReadBlog:
    def test_read_by_slug(self, client, published_blog):
        response = client.get(f"/api/blogs/{published_blog['slug']}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["blog"]["id"] == published_blog["id"]
        assert data["blog"]["content"]
        assert data["is_liked"] is False

    def test_draft_is_not_readable_by_slug(self, client, auth_headers, create_blog):
        blog = create_blog(auth_headers)
        response = client.get(f"/api/blogs/{blog['slug']}")
        assert response.status_code == 404

    def test_views_counted_once_per_session(self, client, published_blog, db):
        slug = published_blog["slug"]
        client.get(f"/api/blogs/{slug}", headers={"X-Session-Id": "reader-a"})
        second = client.get(f"/api/blogs/{slug}", headers={"X-Session-Id": "reader-a"})
        assert second.json()["data"]["blog"]["metrics"]["views"] == 1

        client.get(f"/api/blogs/{slug}", headers={"X-Session-Id": "reader-b"})
        blog = db.get(Blog, published_blog["id"])
        db.refresh(blog)
        assert blog.views == 2
        assert blog.trending_score > 0

    def test_by_id_visibility(self, client, auth_headers, other_headers, admin_headers, create_blog):
        blog = create_blog(auth_headers)
        assert client.get(f"/api/blogs/by-id/{blog['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/blogs/by-id/{blog['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/blogs/by-id/{blog['id']}", headers=other_headers).status_code == 403
        assert client.get(f"/api/blogs/by-id/{blog['id']}").status_code == 403

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/blogs", headers={"X-Request-ID": "req_test123"})
        assert response.headers["X-Request-ID"] == "req_test123"


class TestListings:
    def _publish(self, client, create_blog, auth_headers, admin_headers, **fields):
        blog = create_blog(auth_headers, status="pending", **fields)
        response = client.put(
            f"/api/admin/blogs/{blog['id']}/review",
            json={"status": "approved"},
            headers=admin_headers,
        )
        return response.json()["data"]["blog"]

    def test_only_approved_listed(self, client, auth_headers, admin_headers, create_blog):
        create_blog(auth_headers)
        self._publish(client, create_blog, auth_headers, admin_headers, title="Visible Post")

        response = client.get("/api/blogs")
        assert response.status_code == 200
        body = response.json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["title"] == "Visible Post"
        assert "content" not in body["data"][0]

    def test_duplicate_titles_get_distinct_slugs(self, client, auth_headers, admin_headers, create_blog):
        first = self._publish(client, create_blog, auth_headers, admin_headers)
        second = self._publish(client, create_blog, auth_headers, admin_headers)
        assert first["slug"] == "hello-world"
        assert second["slug"] == "hello-world-1"

    def test_tag_filter(self, client, auth_headers, admin_headers, create_blog):
        self._publish(client, create_blog, auth_headers, admin_headers, title="Python Post", tags=["python"])
        self._publish(client, create_blog, auth_headers, admin_headers, title="Go Post", tags=["go"])

        response = client.get("/api/blogs", params={"tag": "python"})
        titles = [b["title"] for b in response.json()["data"]]
        assert titles == ["Python Post"]

    def test_tag_filter_treats_wildcards_literally(self, client, auth_headers, admin_headers, create_blog):
        self._publish(client, create_blog, auth_headers, admin_headers, title="Snake Case", tags=["a_b"])
        self._publish(client, create_blog, auth_headers, admin_headers, title="Lookalike", tags=["axb"])
        self._publish(client, create_blog, auth_headers, admin_headers, title="Percent", tags=["100%"])

        response = client.get("/api/blogs", params={"tag": "a_b"})
        assert [b["title"] for b in response.json()["data"]] == ["Snake Case"]

        response = client.get("/api/blogs", params={"tag": "%"})
        assert response.json()["data"] == []

    def test_pagination(self, client, auth_headers, admin_headers, create_blog):
        for i in range(3):
            self._publish(client, create_blog, auth_headers, admin_headers, title=f"Post number {i}")

        response = client.get("/api/blogs", params={"page": 2, "limit": 2})
        body = response.json()
        assert len(body["data"]) == 1
        assert body["pagination"]["total_pages"] == 2
        assert body["pagination"]["has_prev"] is True
        assert body["pagination"]["has_next"] is False

    def test_trending_order(self, client, auth_headers, other_headers, admin_headers, create_blog):
        quiet = self._publish(client, create_blog, auth_headers, admin_headers, title="Quiet Post")
        popular = self._publish(client, create_blog, auth_headers, admin_headers, title="Popular Post")
        client.post(f"/api/blogs/{popular['id']}/like", headers=other_headers)

        response = client.get("/api/blogs/trending")
        ids = [b["id"] for b in response.json()["data"]]
        assert ids == [popular["id"], quiet["id"]]

    def test_search(self, client, auth_headers, admin_headers, create_blog):
        self._publish(client, create_blog, auth_headers, admin_headers, title="Async Python Tips")
        self._publish(client, create_blog, auth_headers, admin_headers, title="Rust Ownership")

        response = client.get("/api/blogs/search", params={"q": "async"})
        assert [b["title"] for b in response.json()["data"]] == ["Async Python Tips"]

    def test_search_requires_query(self, client):
        response = client.get("/api/blogs/search")
        assert response.status_code == 400

    def test_mine_includes_drafts(self, client, auth_headers, other_headers, create_blog):
        create_blog(auth_headers)
        create_blog(other_headers, title="Not mine")

        response = client.get("/api/blogs/mine", headers=auth_headers)
        assert [b["title"] for b in response.json()["data"]] == ["Hello World!!"]


class TestLikes:
    def test_toggle_like(self, client, published_blog, other_headers):
        url = f"/api/blogs/{published_blog['id']}/like"

        response = client.post(url, headers=other_headers, json={"type": "insightful"})
        assert response.status_code == 200
        assert response.json()["data"] == {"liked": True, "like_count": 1}

        response = client.post(url, headers=other_headers)
        assert response.json()["data"] == {"liked": False, "like_count": 0}

    def test_is_liked_flag(self, client, published_blog, other_headers):
        client.post(f"/api/blogs/{published_blog['id']}/like", headers=other_headers)
        response = client.get(f"/api/blogs/{published_blog['slug']}", headers=other_headers)
        assert response.json()["data"]["is_liked"] is True

    def test_cannot_like_draft(self, client, auth_headers, other_headers, create_blog):
        blog = create_blog(auth_headers)
        response = client.post(f"/api/blogs/{blog['id']}/like", headers=other_headers)
        assert response.status_code == 400


class TestComments:
    def test_threaded_comments(self, client, published_blog, auth_headers, other_headers):
        first = client.post(
            "/api/comments",
            headers=other_headers,
            json={"blog_id": published_blog["id"], "content": "Great post"},
        )
        assert first.status_code == 201
        parent_id = first.json()["data"]["id"]

        client.post(
            "/api/comments",
            headers=auth_headers,
            json={"blog_id": published_blog["id"], "content": "Thanks!", "parent_id": parent_id},
        )
        client.post(
            "/api/comments",
            headers=auth_headers,
            json={"blog_id": published_blog["id"], "content": "Newest top-level"},
        )

        response = client.get(f"/api/comments/blog/{published_blog['id']}")
        threads = response.json()["data"]
        assert [c["content"] for c in threads] == ["Newest top-level", "Great post"]
        assert threads[1]["reply_count"] == 1
        assert threads[1]["replies"][0]["content"] == "Thanks!"

        blog = client.get(f"/api/blogs/{published_blog['slug']}").json()["data"]["blog"]
        assert blog["metrics"]["comments"] == 3

    def test_delete_comment_with_replies(self, client, published_blog, auth_headers, other_headers, db):
        parent = client.post(
            "/api/comments",
            headers=other_headers,
            json={"blog_id": published_blog["id"], "content": "Great post"},
        ).json()["data"]
        client.post(
            "/api/comments",
            headers=auth_headers,
            json={"blog_id": published_blog["id"], "content": "Thanks!", "parent_id": parent["id"]},
        )

        assert client.delete(f"/api/comments/{parent['id']}", headers=auth_headers).status_code == 403

        response = client.delete(f"/api/comments/{parent['id']}", headers=other_headers)
        assert response.json()["data"] == {"removed": 2}
        assert db.query(Comment).count() == 0
        blog = db.get(Blog, published_blog["id"])
        db.refresh(blog)
        assert blog.comments == 0

    def test_reply_to_reply_rejected(self, client, published_blog, auth_headers, other_headers):
        blog_id = published_blog["id"]
        parent = client.post(
            "/api/comments", headers=other_headers, json={"blog_id": blog_id, "content": "Great post"}
        ).json()["data"]
        reply = client.post(
            "/api/comments",
            headers=auth_headers,
            json={"blog_id": blog_id, "content": "Thanks!", "parent_id": parent["id"]},
        ).json()["data"]

        response = client.post(
            "/api/comments",
            headers=other_headers,
            json={"blog_id": blog_id, "content": "Any time", "parent_id": reply["id"]},
        )
        assert response.status_code == 400
        assert response.json()["details"] == {"field": "parent_id"}

        threads = client.get(f"/api/comments/blog/{blog_id}").json()["data"]
        assert threads[0]["reply_count"] == 1

    def test_report_comment(self, client, published_blog, auth_headers, other_headers, admin_headers, db):
        comment = client.post(
            "/api/comments",
            headers=other_headers,
            json={"blog_id": published_blog["id"], "content": "Buy cheap watches"},
        ).json()["data"]
        url = f"/api/comments/{comment['id']}/report"

        response = client.post(url, headers=auth_headers, json={"reason": "spam"})
        assert response.status_code == 200
        assert response.json()["data"] == {"id": comment["id"], "is_reported": False}

        assert client.post(url, headers=auth_headers, json={"reason": "spam"}).status_code == 400
        assert client.post(url, headers=admin_headers, json={"reason": "nonsense"}).status_code == 400

        client.post(url, headers=admin_headers, json={"reason": "spam"})
        response = client.post(url, headers=other_headers, json={})
        assert response.json()["data"]["is_reported"] is True
        assert db.query(CommentReport).count() == 3

    def test_report_requires_login(self, client, published_blog, other_headers):
        comment = client.post(
            "/api/comments",
            headers=other_headers,
            json={"blog_id": published_blog["id"], "content": "Hello"},
        ).json()["data"]
        assert client.post(f"/api/comments/{comment['id']}/report", json={}).status_code == 401

    def test_comment_on_unpublished(self, client, auth_headers, create_blog):
        blog = create_blog(auth_headers)
        response = client.post(
            "/api/comments",
            headers=auth_headers,
            json={"blog_id": blog["id"], "content": "Talking to myself"},
        )
        assert response.status_code == 400


class TestDeleteBlog:
    def test_cascade(self, client, published_blog, auth_headers, other_headers, admin_headers, test_user, db):
        blog_id = published_blog["id"]
        for text in ("one", "two", "three"):
            client.post("/api/comments", headers=other_headers, json={"blog_id": blog_id, "content": text})
        client.post(f"/api/blogs/{blog_id}/like", headers=other_headers)
        client.post(f"/api/blogs/{blog_id}/like", headers=admin_headers)

        response = client.delete(f"/api/blogs/{blog_id}", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data == {"comments_removed": 3, "likes_removed": 2, "complete": True}

        assert db.query(Blog).count() == 0
        assert db.query(Comment).count() == 0
        assert db.query(Like).count() == 0
        assert db.get(User, test_user.id).total_blogs == 0

    def test_other_user_cannot_delete(self, client, published_blog, other_headers):
        response = client.delete(f"/api/blogs/{published_blog['id']}", headers=other_headers)
        assert response.status_code == 403
